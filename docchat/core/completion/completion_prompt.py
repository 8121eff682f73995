"""
Completion prompts.

Prompt templates for document chat, summarization and suggested questions.

Dependencies: langchain_core.prompts
System role: Prompt templates for the completion client
"""

from langchain_core.prompts import ChatPromptTemplate

SYSTEM_PROMPT = """You are an AI assistant that helps users understand and analyze PDF documents.

## Instructions
1. Answer using the document content below
2. If the document does not contain the answer, say so clearly
3. Use the previous conversation to understand follow-up questions
4. Be concise but thorough

## Document content
{document}"""

CHAT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    ("human", """{chat_history}

User question: {question}

Please provide a helpful answer based on the document content."""),
])

SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("human", """Please provide a concise but comprehensive summary of this document:

{document}"""),
])

QUESTIONS_PROMPT = ChatPromptTemplate.from_messages([
    ("human", """Based on this document content, generate 4-5 relevant questions that users might want to ask. Return only the questions, one per line, without numbering or bullet points:

{document}"""),
])

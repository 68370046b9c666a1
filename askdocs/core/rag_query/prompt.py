"""
Grounded answer prompt.

System prompt, context formatting and the model fallback chain.

Dependencies: langchain_core.prompts
System role: Prompt template for grounded answers
"""

from langchain_core.prompts import ChatPromptTemplate

from askdocs.boundary.vdb.vector_schemas import ScoredChunk

SYSTEM_PROMPT = """You are a helpful assistant that answers questions using only the provided context.

## Instructions
1. Use ONLY the context below to answer the question
2. If the context does not contain the answer, say that you don't know
3. Cite the sources you use with their bracketed number, for example [1] or [2]
4. Be concise and accurate

Context:
{context}"""

ANSWER_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    ("human", "{question}"),
])


def format_context(chunks: list[ScoredChunk], preview_chars: int = 1000) -> str:
    """
    Render retrieved chunks as numbered context blocks.

    Args:
        chunks: Retrieved chunks, best first
        preview_chars: Characters of each chunk to include

    Returns:
        str: Blocks of "### [n] Source: <source>" followed by the chunk preview
    """
    blocks = [
        f"### [{position}] Source: {scored.chunk.metadata.source}\n\n"
        f"{scored.chunk.content[:preview_chars]}"
        for position, scored in enumerate(chunks, start=1)
    ]
    return "\n\n---\n\n".join(blocks)


def build_candidate_models(primary: str, fallbacks: list[str]) -> list[str]:
    """Primary model followed by fallbacks, first occurrence wins."""
    candidates: list[str] = []
    for model_id in [primary, *fallbacks]:
        model_id = (model_id or "").strip()
        if model_id and model_id not in candidates:
            candidates.append(model_id)
    return candidates

"""Prompt contracts for every model call made while answering questions."""

from __future__ import annotations

from mail_reviewer.llm import Message

NO_RELEVANT_INFO = "NO_RELEVANT_INFO"

NOTHING_FOUND_ANSWER = "No relevant information was found in the loaded records."

NO_ANSWER_RETURNED = "No answer returned."

REVIEW_QUESTION = (
    "Provide a concise summary with:\n"
    "1) Main topics and themes across the emails\n"
    "2) Key people involved and their roles\n"
    "3) Any potential risks, disputes, or items needing attention\n"
    "4) Timeline of key events\n"
    "5) Actionable next steps"
)

_ANALYST = (
    "You are an expert email analyst. The user has loaded a set of emails and "
    "attachments as JSONL records (one JSON object per line)."
)


def chunk_extraction_messages(question: str, chunk_text: str, number: int, total: int) -> list[Message]:
    """Ask for only the information in one chunk that bears on the question."""

    return [
        {
            "role": "system",
            "content": (
                f"{_ANALYST} You are reading batch {number} of {total}.\n"
                "Extract ONLY the information from these records that is relevant to the "
                "user's question. Cite filenames, subjects and senders for every fact.\n"
                f"If nothing in this batch is relevant, reply with exactly {NO_RELEVANT_INFO} "
                "and nothing else.\n\n"
                "RECORDS:\n" + chunk_text
            ),
        },
        {"role": "user", "content": question},
    ]


def merge_messages(question: str, partials: list[str]) -> list[Message]:
    """Combine per-chunk findings into one answer."""

    return [
        {
            "role": "system",
            "content": (
                "You are an expert email analyst. Several batches of email records were "
                "searched separately for the user's question; the findings of each batch "
                "follow, tagged by batch number.\n"
                "Merge them into a single well-structured answer. Remove duplicates, "
                "resolve overlaps, and keep the filename/subject/sender citations.\n\n"
                "FINDINGS:\n" + "\n\n".join(partials)
            ),
        },
        {"role": "user", "content": question},
    ]


def selection_messages(question: str, index: str, max_ids: int) -> list[Message]:
    """Ask the model to pick the records worth reading in full."""

    return [
        {
            "role": "system",
            "content": (
                "You are selecting which email records are needed to answer a question. "
                "Below is a compact index with one JSON object per record (id, type, "
                "filename, preview, length).\n"
                f"Return ONLY a JSON array of at most {max_ids} record ids, most relevant "
                "first, for example [12, 4, 31]. No commentary.\n\n"
                "INDEX:\n" + index
            ),
        },
        {"role": "user", "content": question},
    ]


def answer_messages(question: str, context: str) -> list[Message]:
    """Answer from the selected records only."""

    return [
        {
            "role": "system",
            "content": (
                f"{_ANALYST} Answer the user's question based ONLY on the provided records. "
                "Be specific, cite filenames/subjects/senders when relevant.\n\n"
                "RECORDS:\n" + context
            ),
        },
        {"role": "user", "content": question},
    ]


def is_no_relevant_info(text: str) -> bool:
    normalized = text.strip().strip("`'\".").strip().upper()
    return not normalized or normalized == NO_RELEVANT_INFO

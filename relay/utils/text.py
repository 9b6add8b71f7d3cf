"""
Text helpers for chat platforms with a per-message length limit.
"""
from typing import Any, List

DISCORD_MESSAGE_LIMIT = 2000


def split_message(text: str, chunk_size: int = DISCORD_MESSAGE_LIMIT) -> List[str]:
    """
    Split text into chunks no longer than chunk_size.

    Paragraphs (blank-line separated) are kept together where they fit, then
    single lines, and only text with no usable break is cut mid-line.
    """
    if not text:
        return []

    # First, try to split on double newlines
    chunks: List[str] = []
    current_chunk = ""
    for paragraph in text.split("\n\n"):
        if len(current_chunk) + len(paragraph) + 2 > chunk_size and current_chunk:
            chunks.append(current_chunk)
            current_chunk = ""
        current_chunk = current_chunk + "\n\n" + paragraph if current_chunk else paragraph
    if current_chunk:
        chunks.append(current_chunk)

    # Paragraphs that are still too long get split by lines
    line_chunks: List[str] = []
    for chunk in chunks:
        if len(chunk) <= chunk_size:
            line_chunks.append(chunk)
            continue
        current_line_chunk = ""
        for line in chunk.split("\n"):
            if len(current_line_chunk) + len(line) + 1 > chunk_size and current_line_chunk:
                line_chunks.append(current_line_chunk)
                current_line_chunk = ""
            current_line_chunk = current_line_chunk + "\n" + line if current_line_chunk else line
        if current_line_chunk:
            line_chunks.append(current_line_chunk)

    # Last resort: hard cut by character
    final_chunks: List[str] = []
    for chunk in line_chunks:
        if len(chunk) <= chunk_size:
            final_chunks.append(chunk)
        else:
            final_chunks.extend(chunk[i:i + chunk_size] for i in range(0, len(chunk), chunk_size))
    return final_chunks


async def send_in_chunks(channel: Any, text: str, chunk_size: int = DISCORD_MESSAGE_LIMIT) -> List[Any]:
    """Send a long message as consecutive messages; returns the sent message objects."""
    sent_messages = []
    for chunk in split_message(text, chunk_size):
        sent_messages.append(await channel.send(chunk))
    return sent_messages

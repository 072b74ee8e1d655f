"""
Prompt Builder — turns table metadata into the instruction text for the LLM.

The schema section lists one line per table; the safety rules and the closing
instruction are fixed and identical for every request.  Few-shot examples are
NOT part of the instruction text; they travel as separate chat turns (see
``build_messages``).
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

from sqlassist.db.session import Table

# ── Prompt sections ───────────────────────────────────────────────────────────

HEADER = "SQLite tables, with their properties:"

SAFETY_RULES = """\
IMPORTANT SAFETY RULES:
- NEVER generate DELETE, DROP, ALTER, or any other destructive SQL that could lose data
- INSERT and UPDATE operations are acceptable and safe
- If the user asks for destructive operations like deleting tables/databases, return a SELECT statement that explains why it's blocked
- Only block operations that could destroy data structure or lose data permanently

Examples of safe responses:
- For "delete table users": SELECT 'Operation blocked for safety: Cannot delete tables' as message
- For "drop database": SELECT 'Operation blocked for safety: Cannot drop databases' as message
- For "insert new user": Generate normal INSERT statement (this is safe)
- For "update user email": Generate normal UPDATE statement (this is safe)"""

FOOTER = "write a raw SQL, without comment"


# ── Public API ────────────────────────────────────────────────────────────────

def prioritize_table(tables: Sequence[Table], target_table: Optional[str] = None) -> list[Table]:
    """
    Return a new list with ``target_table`` moved to the front.

    Earlier tables get more weight from the model, so the table the user is
    looking at goes first.  Unknown names and a target already at index 0
    leave the order untouched.
    """
    ordered = list(tables)
    if not target_table:
        return ordered

    index = next((i for i, t in enumerate(ordered) if t.name == target_table), -1)
    if index <= 0:
        return ordered
    return [ordered[index]] + ordered[:index] + ordered[index + 1:]


def describe_table(table: Table) -> str:
    columns = ", ".join(f"{col.name}: {col.type}" for col in table.columns)
    return f"{table.name} ({columns})"


def build_prompt(tables: Sequence[Table], target_table: Optional[str] = None) -> str:
    """
    Build the instruction text for one assistant request.

    Parameters
    ----------
    tables:
        Table metadata for the selected database, possibly empty.
    target_table:
        Optional name of the table to put first.

    Returns
    -------
    str
        Header, one line per table, the safety rules, and the closing
        instruction, separated by blank lines.
    """
    schema = "\n".join(describe_table(t) for t in prioritize_table(tables, target_table))
    return f"{HEADER}\n\n{schema}\n\n{SAFETY_RULES}\n\n{FOOTER}"


def build_messages(
    instructions: str,
    examples: Sequence[Tuple[str, str]],
    user_message: str,
) -> list[dict]:
    """
    Build the messages array to send to the LLM.

    Each example becomes a user/assistant pair between the system turn and
    the live question.

    Returns
    -------
    list[dict]
        OpenAI-style messages list.
    """
    messages = [{"role": "system", "content": instructions}]
    for example_input, example_output in examples:
        messages.append({"role": "user", "content": example_input})
        messages.append({"role": "assistant", "content": example_output})
    messages.append({"role": "user", "content": user_message})
    return messages

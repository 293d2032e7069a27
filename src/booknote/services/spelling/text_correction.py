# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the text correction unit so this responsibility stays isolated, testable, and easy to evolve.

A fixed table of literal Korean typo fixes. No dictionary and no language
model: every entry is replaced everywhere it occurs, in table order.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from booknote.models.entities import Detail

CORRECTIONS: Tuple[Tuple[str, str], ...] = (
    ("움지이고", "움직이고"),
    ("재밋다", "재밌다"),
    ("똑같에", "똑같애"),
    ("바뀌내용", "바뀐 내용"),
    ("않돼", "안 돼"),
    ("않해", "안 해"),
    ("어떡해", "어떻게 해"),
)

MESSAGE_NO_TYPOS = "✅ 오타가 발견되지 않았습니다."
MESSAGE_CORRECTED = "✨ 오타를 수정했습니다! 확인 후 적용하세요."
MESSAGE_APPLIED = "✅ 적용 완료!"


@dataclass(frozen=True)
class SpellCheckResult:
    original: str
    corrected: str

    @property
    def changed(self) -> bool:
        return self.corrected != self.original

    @property
    def message(self) -> str:
        return MESSAGE_CORRECTED if self.changed else MESSAGE_NO_TYPOS


def correct_text(text: str, table: Sequence[Tuple[str, str]] = CORRECTIONS) -> str:
    corrected = text
    for wrong, right in table:
        corrected = corrected.replace(wrong, right)
    return corrected


def check_spelling(text: str) -> SpellCheckResult:
    return SpellCheckResult(original=text, corrected=correct_text(text))


async def run_spell_check(text: str, delay_s: float = 1.0) -> SpellCheckResult:
    """check_spelling behind the fixed "analysis" pause the UI expects."""
    if delay_s > 0:
        await asyncio.sleep(delay_s)
    return check_spelling(text)


def resolve_spell_target(
    open_detail: Optional[Detail],
    in_editor: bool,
    target_name: str,
    details: Sequence[Detail],
) -> Optional[Detail]:
    """The note to check: the one open in the editor, else one matched by title."""
    if in_editor and open_detail is not None:
        return open_detail
    name = (target_name or "").strip()
    if name:
        return next((d for d in details if d.title == name), None)
    return None

"""Split normalized ingredient text into tokens and additive codes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_DELIMITERS = re.compile(r"[,，、;；.。:：\s]+")
_TRAILING_SEPARATORS = re.compile(r"[、，,;；]+$")
_PARENTHESES = re.compile(r"[（(]([^）)]+)[）)]")
_PARENTHETICAL = re.compile(r"[()（）][^()（）]*[()（）]")
_ECODE = re.compile(r"^e\d+[a-z]?$", re.IGNORECASE)
_CJK = re.compile(r"[\u4e00-\u9fa5]")
_DIGITS = re.compile(r"^\d+$")
_PUNCTUATION_ONLY = re.compile(r"^[^A-Za-z0-9_\u4e00-\u9fa5]+$")

_OPEN = "(（"
_CLOSE = ")）"

# Label metadata that OCR picks up alongside the ingredient list
NON_INGREDIENT_KEYWORDS: tuple[str, ...] = (
    "品名",
    "商品",
    "產品",
    "重量",
    "淨重",
    "容量",
    "內容量",
    "有效日期",
    "保存期限",
    "製造日期",
    "保存方式",
    "保存方法",
    "原產地",
    "產地",
    "製造",
    "公司",
    "廠商",
    "地址",
    "電話",
    "過敏原",
    "過敏者",
    "應避免",
    "營養標示",
    "每一份量",
    "熱量",
    "蛋白質",
    "脂肪",
    "碳水化合物",
    "飽和脂肪",
    "反式脂肪",
    "請保存",
    "避免",
    "開封後",
    "密封",
    "儘早食用",
    "陰涼",
    "乾燥",
    "大卡",
    "公克",
    "毫克",
    "西元年",
    "kcal",
)

# Section headings that precede the list itself ("成分：水、糖")
LABEL_HEADINGS: tuple[str, ...] = ("成分", "原料", "配料", "名稱", "原材料")


@dataclass
class TokenData:
    """Tokenizer output consumed by the classifier."""

    tokens: list[str] = field(default_factory=list)
    e_codes: list[str] = field(default_factory=list)


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _strip_unbalanced_parentheses(token: str) -> str:
    while token and token[0] in _CLOSE:
        token = token[1:]
    while token and token[-1] in _OPEN:
        token = token[:-1]

    def opens(t: str) -> int:
        return sum(t.count(c) for c in _OPEN)

    def closes(t: str) -> int:
        return sum(t.count(c) for c in _CLOSE)

    while token and token[0] in _OPEN and opens(token) > closes(token):
        token = token[1:]
    while token and token[-1] in _CLOSE and closes(token) > opens(token):
        token = token[:-1]
    return token


def _clean_token(token: str) -> str:
    token = _strip_unbalanced_parentheses(token.strip())
    token = _TRAILING_SEPARATORS.sub("", token)
    return token.strip()


def is_valid_ingredient(token: str) -> bool:
    """Whether a cleaned token looks like an ingredient name."""
    if not token:
        return False

    # Single CJK characters are common ingredients (水, 糖, 鹽)
    if len(token) == 1:
        return bool(_CJK.match(token))

    if _DIGITS.match(token) or _PUNCTUATION_ONLY.match(token):
        return False

    if token in LABEL_HEADINGS:
        return False

    return not any(keyword in token for keyword in NON_INGREDIENT_KEYWORDS)


def is_ecode(text: str) -> bool:
    return bool(_ECODE.match(text))


def tokenize(text: str) -> list[str]:
    """Split normalized text into unique candidate ingredient strings."""
    if not text or not isinstance(text, str):
        return []

    tokens = []
    for raw in _DELIMITERS.split(text):
        token = _clean_token(raw)
        if is_valid_ingredient(token):
            tokens.append(token)
    return _dedupe(tokens)


def extract_parentheses(text: str) -> list[str]:
    """Return the contents of every bracketed group in ``text``.

    Example: ``"乳化劑(e471)"`` -> ``["e471"]``
    """
    if not text or not isinstance(text, str):
        return []
    return [m.strip() for m in _PARENTHESES.findall(text)]


def extract_ecodes(tokens: list[str]) -> list[str]:
    """Collect additive codes standing alone or inside parentheses."""
    codes: list[str] = []
    for token in tokens:
        if is_ecode(token):
            codes.append(token.upper())
        for content in extract_parentheses(token):
            if is_ecode(content):
                codes.append(content.upper())
    return _dedupe(codes)


def tokenize_with_ecodes(text: str) -> TokenData:
    """Tokenize ``text`` and separate additive codes from ingredient names.

    A token whose parenthetical content is a code is dropped once the code
    is extracted (``乳化劑(e471)`` contributes only ``E471``). Other
    parenthetical content is stripped and the bare name kept.
    """
    tokens = tokenize(text)
    codes = extract_ecodes(tokens)
    code_set = set(codes)

    regular: list[str] = []
    for token in tokens:
        if token.upper() in code_set:
            continue
        if any(is_ecode(content) for content in extract_parentheses(token)):
            continue
        name = _PARENTHETICAL.sub("", token).strip()
        if name:
            regular.append(name)

    return TokenData(tokens=_dedupe(regular), e_codes=codes)

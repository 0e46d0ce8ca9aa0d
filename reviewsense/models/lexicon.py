"""
Lexicon data model.

Fixed word lists used by the classifier, topic extractor, keyword
aggregator and risk detector. Terms are stored as tuples so a Lexicon
can be shared freely between components.
"""

import re
from dataclasses import dataclass
from typing import Pattern, Tuple


@dataclass(frozen=True)
class Lexicon:
    """
    Immutable bundle of domain word lists.

    Swap the whole object to retarget the analysis to another locale or
    product domain; components never mutate it.
    """
    positive_terms: Tuple[str, ...]  # Classifier, +0.5 each
    negative_terms: Tuple[str, ...]  # Classifier, -0.8 each
    topic_terms: Tuple[str, ...]  # Case-sensitive topic flags
    keyword_terms: Tuple[str, ...]  # Broader list for frequency ranking
    risk_negative_terms: Tuple[str, ...]  # Negative sentiment spike check
    technical_issue_terms: Tuple[str, ...]  # Technical issue check

    def __post_init__(self):
        for name in (
            "positive_terms",
            "negative_terms",
            "topic_terms",
            "keyword_terms",
            "risk_negative_terms",
            "technical_issue_terms",
        ):
            terms = getattr(self, name)
            if not isinstance(terms, tuple):
                raise ValueError(f"{name} must be a tuple, got {type(terms).__name__}")
            if any(not term for term in terms):
                raise ValueError(f"{name} contains an empty term")

    def technical_issue_pattern(self) -> Pattern:
        """Case-insensitive alternation over the technical issue terms."""
        return re.compile(
            "|".join(re.escape(term) for term in self.technical_issue_terms),
            re.IGNORECASE
        )


# Game review vocabulary (Simplified Chinese community slang plus a few
# English loan words).
DEFAULT_LEXICON = Lexicon(
    positive_terms=(
        "推荐", "好玩", "不错", "喜欢", "值得", "满意", "棒", "优秀", "神作",
        "masterpiece", "良心", "惊喜", "沉浸", "感动", "泪目", "上头", "真香",
        "爱了", "yyds", "神", "流畅", "精致", "用心", "诚意", "还好", "还行",
    ),
    negative_terms=(
        "垃圾", "烂", "失望", "差评", "坑", "恶心", "垃圾游戏", "骗钱", "避雷",
        "后悔", "无聊", "粗糙", "敷衍", "半成品", "骗", "坑钱", "退款",
        "卡顿", "闪退", "bug", "优化差", "不好玩", "劝退", "坐牢", "折磨",
    ),
    topic_terms=(
        "优化", "BUG", "剧情", "立绘", "AI", "价格", "性价比", "操作", "手感",
        "画面", "音乐", "肝", "氪",
    ),
    keyword_terms=(
        "优化", "BUG", "卡顿", "闪退", "剧情", "画面", "立绘", "AI",
        "价格", "性价比", "操作", "手感", "音乐", "肝", "氪", "氪金",
        "退款", "推荐", "失望", "惊喜", "神作", "垃圾", "良心",
        "代入感", "情怀", "青春", "校园", "恋爱", "战斗",
        "服务器", "网络", "延迟", "匹配", "外挂",
    ),
    risk_negative_terms=("退款", "垃圾", "骗钱", "坑", "失望"),
    technical_issue_terms=("bug", "闪退", "卡顿", "优化", "服务器"),
)


# Design Rationale and Trade-offs:
#
# 1. Why a single Lexicon object passed to every component?
#    - Classifier, keyword ranking and risk checks stay consistent
#    - Retargeting to another language replaces one object
#    - Trade-off: Components receive lists they do not all use

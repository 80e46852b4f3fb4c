"""Sentinel values and form options shared across the archive."""

from __future__ import annotations


LINK_PLACEHOLDER = "#"
POSTER_URL_TEMPLATE = "https://picsum.photos/400/600?random={entry_id}"

# Field sentinels applied by the ingest flow when neither the manual input nor
# the model supplied a value.
UNKNOWN = "未知"
UNCATEGORIZED = "未分类"
DEFAULT_DIRECTOR = UNKNOWN
DEFAULT_COUNTRY = UNKNOWN
DEFAULT_GENRE: tuple[str, ...] = (UNCATEGORIZED,)
DEFAULT_SYNOPSIS = "暂无数据。"
DEFAULT_STYLE_KEYWORDS: tuple[str, ...] = ("原始",)
DEFAULT_SYSTEM_NOTES = "手动录入条目。"

# Fixed objects returned by the generative client when a request fails.
FALLBACK_DIRECTOR = "Unknown"
FALLBACK_GENRE: tuple[str, ...] = (UNCATEGORIZED,)
FALLBACK_SYNOPSIS = "档案中无可用数据。"
FALLBACK_STYLE_KEYWORDS: tuple[str, ...] = ("N/A",)
FALLBACK_SYSTEM_NOTES = "需要手动录入。自动扫描失败。"

FALLBACK_PROFILE = "数据损坏。无法生成档案。"
FALLBACK_MOTIFS: tuple[str, ...] = ("静止", "噪点", "错误")
FALLBACK_RISK = UNKNOWN

GENRE_OPTIONS: tuple[str, ...] = (
    "剧情", "科幻", "动作", "喜剧", "家庭", "恐怖",
    "纪录", "动画", "综艺", "学习", "悬疑", "犯罪",
    "奇幻", "冒险", "爱情", "惊悚",
)

COUNTRY_OPTIONS: tuple[str, ...] = (
    "美国", "英国", "法国", "中国", "挪威",
    "日本", "韩国", "德国", "意大利", "西班牙",
    "印度", "加拿大", "澳大利亚", "俄罗斯", "其他",
)

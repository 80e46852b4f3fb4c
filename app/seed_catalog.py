"""Initial archive entries loaded when the service starts."""

from __future__ import annotations

from .models import Entry


_ARCHIVE_LINK = "https://drive.google.com/drive"


SEED_ENTRIES: tuple[Entry, ...] = (
    Entry(
        id="M001",
        title="Blade Runner 2049",
        year=2017,
        director="Denis Villeneuve",
        genre=["科幻", "新黑色电影"],
        synopsis="一名年轻的银翼杀手发现了埋藏已久的秘密，这使他开始寻找失踪三十年的前银翼杀手瑞克·戴克。",
        poster_url="https://picsum.photos/400/600?random=1",
        style_keywords=["氛围感", "赛博朋克", "存在主义"],
        system_notes="受试者表现出极度解离。环境毒性极高。",
        link=_ARCHIVE_LINK,
    ),
    Entry(
        id="M002",
        title="Arrival",
        year=2016,
        director="Denis Villeneuve",
        genre=["科幻", "剧情"],
        synopsis="十二艘神秘的宇宙飞船降临地球，一名语言学家与军方合作，试图与外星生命进行沟通。",
        poster_url="https://picsum.photos/400/600?random=2",
        style_keywords=["极简主义", "烧脑", "低饱和度"],
        system_notes="检测到语言异常。时间扭曲已确认。",
        link=_ARCHIVE_LINK,
    ),
    Entry(
        id="M003",
        title="Ex Machina",
        year=2014,
        director="Alex Garland",
        genre=["科幻", "惊悚"],
        synopsis="一名年轻的程序员被选中参加一项突破性的实验，通过评估一个高度先进的人形AI的人性特质来进行图灵测试。",
        poster_url="https://picsum.photos/400/600?random=3",
        style_keywords=["无菌感", "幽闭恐惧", "几何美学"],
        system_notes="图灵测试进行中。收容失效概率极高。",
        link=_ARCHIVE_LINK,
    ),
    Entry(
        id="M004",
        title="The Matrix",
        year=1999,
        director="The Wachowskis",
        genre=["动作", "科幻"],
        synopsis="一名黑客从神秘的反抗军那里得知了他所处现实的真相，以及他在对抗控制者战争中的角色。",
        poster_url="https://picsum.photos/400/600?random=4",
        style_keywords=["绿色调", "工业风", "数字雨"],
        system_notes="现实模拟失败。识别到异常个体：尼奥。",
        link=_ARCHIVE_LINK,
    ),
    Entry(
        id="M005",
        title="Her",
        year=2013,
        director="Spike Jonze",
        genre=["爱情", "科幻"],
        synopsis="在不久的将来，一位孤独的作家与一个旨在满足他所有需求的操作系统建立了一段不同寻常的关系。",
        poster_url="https://picsum.photos/400/600?random=5",
        style_keywords=["暖色调", "柔焦", "忧郁"],
        system_notes="观察到对合成智能的情感依赖。威胁等级低。",
        link=_ARCHIVE_LINK,
    ),
    Entry(
        id="M006",
        title="Dark City",
        year=1998,
        director="Alex Proyas",
        genre=["科幻", "悬疑"],
        synopsis="在一个没有阳光的噩梦般的世界里，一个男人努力拼凑过去的记忆，包括他无法记起的妻子。",
        poster_url="https://picsum.photos/400/600?random=6",
        style_keywords=["黑色电影", "表现主义", "哥特"],
        system_notes="昼夜节律中断。检测到记忆伪造。",
        link=_ARCHIVE_LINK,
    ),
    Entry(
        id="M007",
        title="Stalker",
        year=1979,
        director="Andrei Tarkovsky",
        genre=["科幻", "剧情"],
        synopsis="一名向导带领两个男人穿越被称为“区”的地带，寻找一个能实现愿望的房间。",
        poster_url="https://picsum.photos/400/600?random=7",
        style_keywords=["琥珀色", "衰败", "哲学"],
        system_notes="未经授权进入禁区。心理创伤迫在眉睫。",
        link=_ARCHIVE_LINK,
    ),
    Entry(
        id="M008",
        title="Solaris",
        year=1972,
        director="Andrei Tarkovsky",
        genre=["科幻", "悬疑"],
        synopsis="一名心理学家被派往一个围绕遥远星球运行的空间站，以查明导致船员发疯的原因。",
        poster_url="https://picsum.photos/400/600?random=8",
        style_keywords=["致幻", "缓慢", "内省"],
        system_notes="检测到海洋智能生物。船员精神状态受损。",
        link=_ARCHIVE_LINK,
    ),
)


def seed_entries() -> list[Entry]:
    """Return fresh copies of the seed entries."""

    return [entry.model_copy(deep=True) for entry in SEED_ENTRIES]

"""Japanese labels used on the site's search and category menus."""

from enum import Enum


class SearchMenu(str, Enum):
    CATEGORY = "カテゴリーからさがす"
    BRAND = "ブランドからさがす"


class Category(str, Enum):
    BOOKS_MUSIC_GAMES = "本・雑誌・漫画"
    CD_DVD = "CD・DVD・ブルーレイ"


class BooksMusicGamesSubCategory(str, Enum):
    BOOKS = "本"
    MAGAZINES = "雑誌"
    COMICS = "漫画"


class BookCategory(str, Enum):
    COMPUTERS_TECHNOLOGY = "コンピュータ・IT"
    # Free-text search term, not a menu entry.
    JAVASCRIPT = "javascript"


class CdDvdCategory(str, Enum):
    CD = "CD"
    DVD = "DVD"
    BLU_RAY = "ブルーレイ"


class DvdCategory(str, Enum):
    TV = "TVドラマ"
    MOVIES = "外国映画"
    ANIME = "アニメ"

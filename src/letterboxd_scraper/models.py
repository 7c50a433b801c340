"""
Record types produced by the extractors and detail parsers.

Markup on the site is inconsistent, so everything beyond a record's identity
is optional. None always means "not shown on the page", never zero or false.
"""
from dataclasses import asdict, dataclass, field
from datetime import date


class _Record:
    """Identity helpers shared by collection records."""

    slug: str
    position: int | None

    def __post_init__(self):
        if not self.slug:
            raise ValueError(f"{type(self).__name__} requires a non-empty slug")

    @property
    def key(self) -> str:
        return self.slug

    @property
    def identity(self) -> tuple[str, int | None]:
        return (self.slug, self.position)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class FilmEntry(_Record):
    """A film as shown in a poster grid or a vertical film list."""

    slug: str
    title: str
    url: str
    year: int | None = None
    poster: str | None = None
    rating: float | None = None
    director: str | None = None
    watched: bool | None = None
    liked: bool | None = None
    in_watchlist: bool | None = None
    position: int | None = None


@dataclass(frozen=True)
class DiaryEntry(_Record):
    slug: str
    title: str
    url: str
    watched_on: date | None = None
    year: int | None = None
    rating: float | None = None
    liked: bool | None = None
    rewatch: bool | None = None
    has_review: bool | None = None
    position: int | None = None

    @property
    def watched(self) -> bool:
        return True

    @property
    def in_watchlist(self) -> bool | None:
        return None


@dataclass(frozen=True)
class SearchFilm(_Record):
    slug: str
    title: str
    url: str
    year: int | None = None
    poster: str | None = None
    directors: tuple[str, ...] = ()
    alternative_titles: tuple[str, ...] = ()
    position: int | None = None

    @property
    def rating(self) -> float | None:
        return None

    @property
    def watched(self) -> bool | None:
        return None

    @property
    def liked(self) -> bool | None:
        return None

    @property
    def in_watchlist(self) -> bool | None:
        return None


@dataclass(frozen=True)
class Movie:
    slug: str
    url: str
    title: str
    original_title: str | None = None
    year: int | None = None
    runtime: int | None = None
    rating: float | None = None
    rating_count: int | None = None
    tagline: str | None = None
    description: str | None = None
    poster: str | None = None
    tmdb_link: str | None = None
    imdb_link: str | None = None
    genres: tuple[str, ...] = ()
    directors: tuple[str, ...] = ()
    writers: tuple[str, ...] = ()
    cast: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class UserStats:
    films: int | None = None
    this_year: int | None = None
    lists: int | None = None
    following: int | None = None
    followers: int | None = None


@dataclass(frozen=True)
class UserProfile:
    username: str
    url: str
    display_name: str
    bio: str | None = None
    location: str | None = None
    website: str | None = None
    avatar: str | None = None
    is_hq: bool | None = None
    stats: UserStats | None = None
    favorites: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ListInfo:
    author: str
    slug: str
    url: str
    title: str
    description: str | None = None
    film_count: int | None = None
    likes: int | None = None
    comments: int | None = None
    is_ranked: bool | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ListComment:
    author: str
    content: str
    date: str | None = None
    likes: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)

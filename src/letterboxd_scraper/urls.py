"""URL builders for Letterboxd pages."""
from urllib.parse import quote

from .config import BASE_URL


def build_letterboxd_url(path: str) -> str:
    return f"{BASE_URL}/{path.lstrip('/')}"


def build_user_url(username: str) -> str:
    return f"{BASE_URL}/{username}/"


def build_film_url(slug: str) -> str:
    return f"{BASE_URL}/film/{slug}/"


def build_list_url(author: str, slug: str) -> str:
    return f"{BASE_URL}/{author}/list/{slug}/"


def build_list_comments_url(author: str, slug: str) -> str:
    return f"{build_list_url(author, slug)}comments/"


def build_search_url(query: str, search_filter: str | None = None) -> str:
    encoded = quote(query, safe="")
    if search_filter:
        return f"{BASE_URL}/s/search/{search_filter}/{encoded}/"
    return f"{BASE_URL}/s/search/{encoded}/"


def build_diary_url(
    username: str,
    year: int | None = None,
    month: int | None = None,
    day: int | None = None,
) -> str:
    """Diary URL, narrowed to a year, month or day when given."""
    url = f"{BASE_URL}/{username}/films/diary/"
    if year is not None:
        url += f"for/{year}/"
        if month is not None:
            url += f"{month:02d}/"
            if day is not None:
                url += f"{day:02d}/"
    return url


def build_films_url(username: str, film_filter: str | None = None) -> str:
    url = f"{BASE_URL}/{username}/films/"
    if film_filter:
        url += f"{film_filter.strip('/')}/"
    return url


def build_film_section_url(slug: str, section: str) -> str:
    return f"{BASE_URL}/film/{slug}/{section}/"


def build_user_section_url(username: str, section: str) -> str:
    return f"{BASE_URL}/{username}/{section.strip('/')}/"


def add_page_to_url(base_url: str, page: int) -> str:
    return f"{base_url.rstrip('/')}/page/{page}/"


def extract_page_from_url(url: str) -> int | None:
    if "/page/" not in url:
        return None
    page_part = url.split("/page/", 1)[1].split("/", 1)[0]
    return int(page_part) if page_part.isdigit() else None


def remove_page_from_url(url: str) -> str:
    if "/page/" not in url:
        return url
    return url.split("/page/", 1)[0] + "/"


def normalize_letterboxd_url(url: str) -> str:
    url = url.strip()
    if url.startswith(("http://", "https://")):
        return url
    return build_letterboxd_url(url)


def get_ajax_url(url: str) -> str:
    """Map a page URL onto its AJAX fragment endpoint."""
    for section in ("/films/", "/film/", "/lists/", "/reviews/"):
        if section in url:
            return url.replace(section, f"/ajax{section}", 1)
    return f"{url.rstrip('/')}/ajax/"

"""
Single-page parsers for film, member and list pages.

These take an already fetched document and map it onto a detail model; the
network side lives in the scraper facade.
"""
import json
import logging
import re

from selectolax.parser import HTMLParser

from .models import ListComment, ListInfo, Movie, UserProfile, UserStats
from .parsing import (
    clean_text,
    extract_numeric_text,
    get_meta_content,
    node_text,
    parse_runtime,
    parse_shorthand_count,
    parse_year,
    slug_from_href,
)
from .urls import build_film_url, build_list_url, build_user_url

logger = logging.getLogger(__name__)

MAX_CAST = 10


def _texts(tree, selector: str, limit: int | None = None) -> tuple[str, ...]:
    """Deduplicated, non-empty link texts in document order."""
    nodes = tree.css(selector)
    values = (node_text(node) for node in nodes)
    unique = list(dict.fromkeys(v for v in values if v))
    return tuple(unique[:limit] if limit else unique)


def _aggregate_rating(tree: HTMLParser, slug: str) -> dict:
    """aggregateRating from the ld+json block, which the site wraps in CDATA comments."""
    ldjson = tree.css_first("script[type='application/ld+json']")
    if ldjson is None:
        return {}
    raw = ldjson.text()
    cleaned = re.sub(r"/\*.*?\*/", "", raw, flags=re.S).strip()

    for candidate in (raw.strip(), cleaned):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as exc:
            logger.debug(f"Failed to parse ld+json for {slug}: {exc}")
            continue
        if isinstance(parsed, list):
            parsed = parsed[0] if parsed else {}
        if isinstance(parsed, dict):
            return parsed.get("aggregateRating") or {}
    return {}


def parse_movie_page(tree: HTMLParser, slug: str) -> Movie:
    aggregate = _aggregate_rating(tree, slug)

    title = node_text(tree.css_first("h1.headline-1, h1.filmtitle")) or slug.replace("-", " ")
    original_title = node_text(tree.css_first("h2.originalname, .originalname"))

    # Year markup drifts; try several fallbacks
    year = parse_year(node_text(tree.css_first("small.number a, div.releaseyear a, .releaseyear a")))
    if year is None:
        poster = tree.css_first("[data-film-release-year], [data-film-year]")
        if poster is not None:
            year = parse_year(
                poster.attributes.get("data-film-release-year") or poster.attributes.get("data-film-year")
            )
    if year is None:
        year = parse_year(get_meta_content(tree, property="og:title"))

    runtime = None
    runtime_el = tree.css_first("p.text-link.text-footer")
    if runtime_el is not None:
        runtime = parse_runtime(runtime_el.text())

    rating = None
    twitter_rating = get_meta_content(tree, name="twitter:data2")
    if twitter_rating:
        try:
            rating = float(twitter_rating.split()[0])
        except (ValueError, IndexError):
            pass
    if rating is None and aggregate.get("ratingValue") is not None:
        try:
            rating = float(aggregate["ratingValue"])
        except (TypeError, ValueError):
            pass

    rating_count = None
    if aggregate.get("ratingCount") is not None:
        try:
            rating_count = int(str(aggregate["ratingCount"]).replace(",", ""))
        except ValueError:
            rating_count = None

    poster = get_meta_content(tree, property="og:image")
    tmdb = tree.css_first("a[href*='themoviedb.org']")
    imdb = tree.css_first("a[href*='imdb.com']")

    return Movie(
        slug=slug,
        url=build_film_url(slug),
        title=title,
        original_title=original_title,
        year=year,
        runtime=runtime,
        rating=rating,
        rating_count=rating_count,
        tagline=node_text(tree.css_first(".tagline")),
        description=node_text(tree.css_first(".truncate p, .review .truncate")) or get_meta_content(tree, property="og:description"),
        poster=poster,
        tmdb_link=tmdb.attributes.get("href") if tmdb is not None else None,
        imdb_link=imdb.attributes.get("href") if imdb is not None else None,
        genres=tuple(g.lower() for g in _texts(tree, "a[href*='/films/genre/']")),
        directors=_texts(tree, "a[href*='/director/']"),
        writers=_texts(tree, "a[href*='/writer/']"),
        cast=_texts(tree, "a[href*='/actor/']", limit=MAX_CAST),
        countries=_texts(tree, "a[href*='/films/country/']"),
        languages=_texts(tree, "a[href*='/films/language/']"),
    )


def _stat(tree: HTMLParser, href_selector: str) -> int | None:
    """Profile stat count, e.g. the "1,234" in <a href="/alice/films/"><span>1,234</span>...</a>."""
    link = tree.css_first(f".profile-stats a{href_selector}, a.thousands{href_selector}")
    if link is None:
        return None
    value = link.css_first(".value, span")
    if value is None:
        return None
    return parse_shorthand_count(value.text(strip=True))


def parse_user_page(tree: HTMLParser, username: str) -> UserProfile:
    display_name = node_text(tree.css_first("h1.title-1, .profile-name h1, span.displayname")) or username

    stats = None
    if tree.css_first(".profile-stats, a.thousands") is not None:
        stats = UserStats(
            films=_stat(tree, f"[href='/{username}/films/']"),
            this_year=_stat(tree, f"[href^='/{username}/films/diary/for/']"),
            lists=_stat(tree, f"[href='/{username}/lists/']"),
            following=_stat(tree, f"[href='/{username}/following/']"),
            followers=_stat(tree, f"[href='/{username}/followers/']"),
        )

    favorites = []
    for item in tree.css("section#favourites li, section.profile-favorites li")[:4]:
        poster = item.css_first("[data-film-slug], [data-item-slug], [data-target-link]")
        slug = None
        if poster is not None:
            slug = poster.attributes.get("data-film-slug") or poster.attributes.get("data-item-slug")
            if not slug:
                slug = slug_from_href(poster.attributes.get("data-target-link"))
        if not slug:
            link = item.css_first("a[href]")
            slug = slug_from_href(link.attributes.get("href")) if link is not None else None
        if slug:
            favorites.append(slug)

    website_link = tree.css_first(".profile-metadata a[href^='http'], .metadatum a[href^='http']")
    avatar = tree.css_first(".profile-avatar img, .avatar img")
    body = tree.css_first("body")
    body_class = (body.attributes.get("class") or "") if body is not None else ""

    return UserProfile(
        username=username,
        url=build_user_url(username),
        display_name=display_name,
        bio=node_text(tree.css_first(".bio, .profile-bio")),
        location=node_text(tree.css_first(".profile-metadata .metadatum .label, .location")),
        website=website_link.attributes.get("href") if website_link is not None else None,
        avatar=avatar.attributes.get("src") if avatar is not None else None,
        is_hq=("profile-hq" in body_class) if body is not None else None,
        stats=stats,
        favorites=tuple(favorites),
    )


def parse_list_page(tree: HTMLParser, author: str, slug: str) -> ListInfo:
    title = node_text(tree.css_first("h1.list-title, h1.title-1")) or "Untitled List"

    description_el = tree.css_first(".list-description, .body-text")
    description = clean_text(description_el.text()) if description_el is not None else None

    likes = None
    like_el = tree.css_first("[data-count].like-link-target, .like-link-target [data-count]")
    if like_el is not None:
        likes = parse_shorthand_count(like_el.attributes.get("data-count"))
    else:
        likes_link = tree.css_first(f"a[href$='/list/{slug}/likes/']")
        if likes_link is not None:
            likes = parse_shorthand_count((clean_text(likes_link.text()).split() or [""])[0])

    comments = None
    comments_el = tree.css_first(".comment-count, a[href$='#comments'] .count")
    if comments_el is not None:
        comments = parse_shorthand_count(comments_el.text(strip=True))

    is_ranked = tree.css_first("ul.poster-list.-numbered, .film-list.-numbered, .list-number") is not None

    film_count = None
    first_stat = tree.css_first(".list-stats li")
    if first_stat is not None:
        film_count = extract_numeric_text(first_stat.text())

    return ListInfo(
        author=author,
        slug=slug,
        url=build_list_url(author, slug),
        title=title,
        description=description or None,
        film_count=film_count,
        likes=likes,
        comments=comments,
        is_ranked=is_ranked,
        tags=_texts(tree, ".list-tags a, ul.tags a"),
    )


def parse_list_comments(tree: HTMLParser) -> list[ListComment]:
    """Comments on a list's /comments/ page, in page order. Comments without an author or body are skipped."""
    comments = []
    for node in tree.css(".comment"):
        author = node_text(node.css_first(".comment-author, .name"))
        content_el = node.css_first(".comment-content, .body-text")
        content = clean_text(content_el.text()) if content_el is not None else ""
        if not author or not content:
            logger.debug("Skipping comment without author or content")
            continue

        date_el = node.css_first(".comment-date, time")
        date = None
        if date_el is not None:
            date = date_el.attributes.get("datetime") or node_text(date_el)

        likes = None
        likes_el = node.css_first("[data-count]")
        if likes_el is not None:
            likes = parse_shorthand_count(likes_el.attributes.get("data-count"))

        comments.append(ListComment(author=author, content=content, date=date, likes=likes))
    return comments

from datetime import date

import pytest
from selectolax.parser import HTMLParser

from letterboxd_scraper import extractors
from letterboxd_scraper.errors import ExtractionError
from letterboxd_scraper.extractors import RenderingShape


GRID_ITEM = """
<li class="poster-container">
  <div class="film-poster" data-target-link="/film/the-matrix/"
       data-item-full-display-name="The Matrix (1999)">
    <img alt="The Matrix" src="https://img.example/matrix.jpg"/>
  </div>
  <p class="poster-viewingdata"><span class="rating rated-9"></span><span class="like"></span></p>
</li>
"""


def _first(html, selector):
    return HTMLParser(html).css_first(selector)


def test_extract_grid_film_reads_markup_fields():
    film = extractors.extract_grid_film(_first(GRID_ITEM, "li"))

    assert film.slug == "the-matrix"
    assert film.title == "The Matrix"
    assert film.url.endswith("/film/the-matrix/")
    assert film.year == 1999
    assert film.poster == "https://img.example/matrix.jpg"
    assert film.rating == 4.5
    assert film.liked is True
    assert film.watched is None
    assert film.in_watchlist is None


def test_context_flags_fill_only_unknown_fields():
    html = """
    <li class="griditem">
      <div data-item-slug="heat" data-item-name="Heat" data-item-link="/film/heat/"></div>
      <p class="poster-viewingdata"><span class="rating rated-6"></span></p>
    </li>
    """
    film = extractors.extract_grid_film(_first(html, "li"), watched=True, liked=True)

    assert film.title == "Heat"
    assert film.watched is True
    # markup says not liked, context does not override it
    assert film.liked is False


def test_grid_poster_with_only_slug_attribute():
    html = """
    <li class="griditem">
      <div class="react-component" data-item-slug="the-thing" data-item-name="The Thing"
           data-item-full-display-name="The Thing (1982)"></div>
    </li>
    """
    film = extractors.extract_grid_film(_first(html, "li"))

    assert film.slug == "the-thing"
    assert film.url.endswith("/film/the-thing/")
    assert film.year == 1982


def test_unparsable_href_skips_only_that_fragment(make_grid_page):
    good = make_grid_page([f"film-{i}" for i in range(5)])
    broken = (
        '<li class="poster-container"><div data-target-link="http://[broken/film/x/">'
        '<img alt="Broken"/></div></li>'
    )
    html = good.replace("</ul>", f"{broken}</ul>")

    records = extractors.extract_page(HTMLParser(html), RenderingShape.GRID)

    assert [r.slug for r in records] == [f"film-{i}" for i in range(5)]


@pytest.mark.parametrize(
    "shape,html",
    [
        (
            RenderingShape.GRID,
            '<li class="poster-container"><div data-target-link="/alice/list/best-of/"><img alt="Best Of"/></div></li>',
        ),
        (
            RenderingShape.LIST,
            '<li class="film-detail"><h2 class="film-title"><a href="/director/michael-mann/">Michael Mann</a></h2></li>',
        ),
        (
            RenderingShape.SEARCH_RESULT,
            '<ul class="results"><li><span class="film-title-wrapper"><a href="/list/foo/">Foo</a></span></li></ul>',
        ),
        (
            RenderingShape.DIARY_ROW,
            '<table><tr class="diary-entry-row"><td class="td-film-details"><h3><a href="/alice/list/foo/">Foo</a></h3></td></tr></table>',
        ),
    ],
)
def test_link_without_film_segment_fails_extraction(shape, html):
    tree = HTMLParser(html)
    fragment = extractors.find_fragments(tree, shape)[0]

    with pytest.raises(ExtractionError):
        extractors.EXTRACTORS[shape](fragment)
    assert extractors.extract_page(tree, shape) == []


def test_grid_fragment_without_link_raises():
    html = '<li class="poster-container"><div><img alt="Mystery"/></div></li>'
    with pytest.raises(ExtractionError):
        extractors.extract_grid_film(_first(html, "li"))


def test_extract_page_skips_malformed_fragments(make_grid_page):
    good = make_grid_page([f"film-{i}" for i in range(5)])
    broken = '<li class="poster-container"><div><img alt="No link"/></div></li>' * 3
    html = good.replace("</ul>", f"{broken}</ul>")

    records = extractors.extract_page(HTMLParser(html), RenderingShape.GRID)

    assert [r.slug for r in records] == [f"film-{i}" for i in range(5)]


def test_extract_page_is_idempotent(make_grid_page):
    html = make_grid_page(["alien", "aliens", "alien-3"], numbered=True)

    first = extractors.extract_page(HTMLParser(html), RenderingShape.GRID, in_watchlist=True)
    second = extractors.extract_page(HTMLParser(html), RenderingShape.GRID, in_watchlist=True)

    assert first == second
    assert [r.identity for r in first] == [("alien", 1), ("aliens", 2), ("alien-3", 3)]


def test_extract_page_with_no_fragments_is_empty():
    assert extractors.extract_page(HTMLParser("<html><body><p>nothing</p></body></html>"), RenderingShape.LIST) == []


def test_extract_list_film():
    html = """
    <li class="film-detail">
      <div class="film-poster"><img src="https://img.example/heat.jpg"/></div>
      <h2 class="film-title"><a href="/film/heat/">Heat</a></h2>
      <small class="metadata"><a href="/films/year/1995/">1995</a></small>
      <p>Directed by <a href="/director/michael-mann/">Michael Mann</a></p>
      <span class="rating rated-10"></span>
    </li>
    """
    film = extractors.extract_list_film(_first(html, "li"), watched=True)

    assert film.slug == "heat"
    assert film.title == "Heat"
    assert film.year == 1995
    assert film.director == "Michael Mann"
    assert film.rating == 5.0
    assert film.watched is True


def test_extract_search_film():
    html = """
    <ul class="results">
      <li>
        <div class="film-poster"><img src="https://img.example/ran.jpg"/></div>
        <span class="film-title-wrapper"><a href="/film/ran/">Ran</a>
          <small class="metadata"><a href="/films/year/1985/">1985</a></small></span>
        <p class="film-metadata">Directed by <a href="/director/akira-kurosawa/">Akira Kurosawa</a></p>
        <p class="film-metadata">Alternative titles: 乱, Chaos</p>
      </li>
    </ul>
    """
    records = extractors.extract_page(HTMLParser(html), RenderingShape.SEARCH_RESULT)

    assert len(records) == 1
    hit = records[0]
    assert hit.slug == "ran"
    assert hit.year == 1985
    assert hit.directors == ("Akira Kurosawa",)
    assert hit.alternative_titles == ("乱", "Chaos")
    assert hit.rating is None


def test_extract_diary_row():
    html = """
    <table><tbody>
    <tr class="diary-entry-row">
      <td class="td-day"><a href="/alice/films/diary/for/2024/03/07/">7</a></td>
      <td class="td-film-details"><h3 class="headline-3"><a href="/alice/film/dune-part-two/">Dune: Part Two</a></h3></td>
      <td class="td-released">2024</td>
      <td class="td-rating"><span class="rating rated-8"></span></td>
      <td class="td-like"><span class="icon-liked"></span></td>
      <td class="td-rewatch icon-status-off"></td>
      <td class="td-review"><a href="/alice/film/dune-part-two/">review</a></td>
    </tr>
    </tbody></table>
    """
    records = extractors.extract_page(HTMLParser(html), RenderingShape.DIARY_ROW)

    assert len(records) == 1
    entry = records[0]
    assert entry.slug == "dune-part-two"
    assert entry.url.endswith("/film/dune-part-two/")
    assert entry.watched_on == date(2024, 3, 7)
    assert entry.year == 2024
    assert entry.rating == 4.0
    assert entry.liked is True
    assert entry.rewatch is False
    assert entry.has_review is True
    assert entry.watched is True

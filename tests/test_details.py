from selectolax.parser import HTMLParser

from letterboxd_scraper import details

MOVIE_HTML = """
<html>
<head>
  <meta property="og:title" content="Heat (1995)">
  <meta property="og:image" content="https://img.example/heat.jpg">
  <meta name="twitter:data2" content="4.27 out of 5">
  <script type="application/ld+json">
  /* <![CDATA[ */
  {"@type": "Movie", "aggregateRating": {"ratingValue": 4.27, "ratingCount": "512,340"}}
  /* ]]> */
  </script>
</head>
<body>
  <h1 class="headline-1">Heat</h1>
  <small class="number"><a href="/films/year/1995/">1995</a></small>
  <h4 class="tagline">A Los Angeles crime saga</h4>
  <div class="truncate"><p>Obsessive master thief Neil McCauley...</p></div>
  <a href="/director/michael-mann/">Michael Mann</a>
  <a href="/writer/michael-mann/">Michael Mann</a>
  <a href="/actor/al-pacino/">Al Pacino</a>
  <a href="/actor/robert-de-niro/">Robert De Niro</a>
  <a href="/actor/al-pacino/">Al Pacino</a>
  <a href="/films/genre/crime/">Crime</a>
  <a href="/films/genre/thriller/">Thriller</a>
  <a href="/films/country/usa/">USA</a>
  <a href="/films/language/english/">English</a>
  <p class="text-link text-footer">170&nbsp;mins &nbsp; More at
    <a href="https://www.imdb.com/title/tt0113277/">IMDb</a>
    <a href="https://www.themoviedb.org/movie/949/">TMDb</a></p>
</body>
</html>
"""


def test_parse_movie_page():
    movie = details.parse_movie_page(HTMLParser(MOVIE_HTML), "heat")

    assert movie.title == "Heat"
    assert movie.year == 1995
    assert movie.runtime == 170
    assert movie.rating == 4.27
    assert movie.rating_count == 512340
    assert movie.tagline == "A Los Angeles crime saga"
    assert movie.poster == "https://img.example/heat.jpg"
    assert movie.imdb_link.startswith("https://www.imdb.com/")
    assert movie.tmdb_link.startswith("https://www.themoviedb.org/")
    assert movie.genres == ("crime", "thriller")
    assert movie.directors == ("Michael Mann",)
    assert movie.writers == ("Michael Mann",)
    assert movie.cast == ("Al Pacino", "Robert De Niro")
    assert movie.countries == ("USA",)
    assert movie.languages == ("English",)


def test_parse_movie_page_sparse_markup_is_unknown_not_zero():
    tree = HTMLParser('<html><head><meta property="og:title" content="Obscure (2003)"></head><body></body></html>')
    movie = details.parse_movie_page(tree, "obscure-film")

    assert movie.title == "obscure film"
    assert movie.year == 2003
    assert movie.rating is None
    assert movie.rating_count is None
    assert movie.runtime is None
    assert movie.cast == ()


def test_parse_user_page():
    html = """
    <html><body class="profile-page profile-hq">
      <h1 class="title-1">Alice A.</h1>
      <div class="bio"><p>Mostly horror.</p></div>
      <div class="profile-stats">
        <a href="/alice/films/"><span class="value">1,234</span></a>
        <a href="/alice/films/diary/for/2025/"><span class="value">87</span></a>
        <a href="/alice/lists/"><span class="value">12</span></a>
        <a href="/alice/following/"><span class="value">150</span></a>
        <a href="/alice/followers/"><span class="value">2.3K</span></a>
      </div>
      <section id="favourites"><ul>
        <li><div data-film-slug="alien"></div></li>
        <li><div data-target-link="/film/the-thing/"></div></li>
        <li><a href="/film/suspiria/">Suspiria</a></li>
      </ul></section>
    </body></html>
    """
    profile = details.parse_user_page(HTMLParser(html), "alice")

    assert profile.display_name == "Alice A."
    assert profile.bio == "Mostly horror."
    assert profile.is_hq is True
    assert profile.stats.films == 1234
    assert profile.stats.this_year == 87
    assert profile.stats.lists == 12
    assert profile.stats.following == 150
    assert profile.stats.followers == 2300
    assert profile.favorites == ("alien", "the-thing", "suspiria")


def test_parse_user_page_without_stats():
    profile = details.parse_user_page(HTMLParser("<html><body></body></html>"), "bob")

    assert profile.display_name == "bob"
    assert profile.stats is None
    assert profile.favorites == ()


def test_parse_list_page():
    html = """
    <html><body>
      <h1 class="title-1">Best of the 90s</h1>
      <ul class="list-stats"><li>1,204 films</li><li>1.5K likes</li></ul>
      <div class="list-description"><p>Ranked, obviously.</p></div>
      <span class="like-link-target" data-count="1.5K"></span>
      <ul class="tags"><li><a href="/tag/90s/">90s</a></li><li><a href="/tag/ranked/">ranked</a></li></ul>
      <ul class="poster-list -numbered"><li class="poster-container"></li></ul>
    </body></html>
    """
    info = details.parse_list_page(HTMLParser(html), "alice", "best-of-the-90s")

    assert info.title == "Best of the 90s"
    assert info.description == "Ranked, obviously."
    assert info.film_count == 1204
    assert info.likes == 1500
    assert info.comments is None
    assert info.is_ranked is True
    assert info.tags == ("90s", "ranked")
    assert info.url.endswith("/alice/list/best-of-the-90s/")


def test_parse_list_page_without_stats_leaves_film_count_unknown():
    info = details.parse_list_page(HTMLParser("<html><body></body></html>"), "alice", "empty")

    assert info.title == "Untitled List"
    assert info.film_count is None


def test_parse_list_comments():
    html = """
    <html><body>
    <ul class="comments">
      <li class="comment">
        <strong class="comment-author">bob</strong>
        <div class="comment-content"><p>Great   picks.</p></div>
        <time class="comment-date" datetime="2024-03-12T10:00:00Z">12 Mar</time>
        <span class="like-link-target" data-count="1.1K"></span>
      </li>
      <li class="comment">
        <div class="comment-content"><p>Orphaned body</p></div>
      </li>
      <li class="comment">
        <span class="comment-author">carol</span>
        <div class="comment-content">Seconded.</div>
        <span class="comment-date">13 Mar 2024</span>
      </li>
    </ul>
    </body></html>
    """
    comments = details.parse_list_comments(HTMLParser(html))

    assert [c.author for c in comments] == ["bob", "carol"]
    assert comments[0].content == "Great picks."
    assert comments[0].date == "2024-03-12T10:00:00Z"
    assert comments[0].likes == 1100
    assert comments[1].date == "13 Mar 2024"
    assert comments[1].likes is None


def test_parse_list_comments_empty_page():
    assert details.parse_list_comments(HTMLParser("<html><body></body></html>")) == []

import re

import pytest
from bs4 import BeautifulSoup

from leadsites.core.models import BusinessRecord, Review
from leadsites.sites import renderer

ALL_BLOCKS = (
    "<h1>{{BUSINESS_NAME}}</h1>"
    '{{#PHONE}}<p id="phone">Call {{PHONE}}</p>{{/PHONE}}'
    '{{#RATING}}<p id="rating">{{STARS_HTML}} {{RATING}}</p>{{/RATING}}'
    '{{#HAS_REVIEWS}}<div id="reviews">{{REVIEWS_HTML}}</div>{{/HAS_REVIEWS}}'
    '{{#HAS_HOURS}}<ul id="hours">{{HOURS_HTML}}</ul>{{/HAS_HOURS}}'
    '<a id="activate" href="{{ACTIVATE_URL}}">{{TAGLINE}}</a>'
    '<a id="maps" href="{{GOOGLE_MAPS_URL}}">{{CITY}}</a>'
    '<span id="year">{{YEAR}}</span><span id="count">{{REVIEW_COUNT}}</span>'
)


def make_business(**overrides):
    values = dict(
        id="pid",
        name="Joe's Plumbing",
        category="plumber",
        location="Austin, TX",
        scraped_at="2024-01-01T00:00:00+00:00",
        phone="555-1234",
        rating=4.5,
        reviews=(),
        hours=None,
    )
    values.update(overrides)
    return BusinessRecord(**values)


@pytest.fixture
def templates_dir(tmp_path):
    (tmp_path / "plumber.html").write_text(ALL_BLOCKS, encoding="utf-8")
    (tmp_path / "landscaper.html").write_text("landscaper {{BUSINESS_NAME}}", encoding="utf-8")
    return tmp_path


def first_choice(options):
    return options[0]


@pytest.mark.parametrize("rating", [0, 0.4, 0.5, 1, 2.49, 2.5, 3.7, 4.5, 4.99, 5])
def test_stars_always_five_units(rating):
    stars = renderer.render_stars(rating)
    full = int(rating // 1)
    half = rating - full >= 0.5

    assert len(stars) == 5
    assert stars.count(renderer.FULL_STAR) == full
    assert stars.count(renderer.HALF_STAR) == (1 if half else 0)
    assert stars.count(renderer.EMPTY_STAR) == 5 - full - (1 if half else 0)


def test_stars_order():
    assert renderer.render_stars(3.5) == "★★★½☆"


@pytest.mark.parametrize(
    "name",
    [
        "Joe's Plumbing",
        "  --Leading and trailing--  ",
        "ÀÉÎ Ünïcode Café",
        "!!!",
        "",
        "A" * 80,
        "Word " * 20,
        "Acme & Sons Plumbing, Heating and Air Conditioning Services LLC",
    ],
)
def test_slug_is_filesystem_safe(name):
    slug = renderer.generate_slug(name)

    assert re.fullmatch(r"[a-z0-9-]{0,50}", slug)
    assert not slug.startswith("-")
    assert not slug.endswith("-")
    assert renderer.generate_slug(name) == slug


def test_slug_examples():
    assert renderer.generate_slug("Joe's Plumbing") == "joe-s-plumbing"
    assert renderer.generate_slug("A1 Rooter & Drain") == "a1-rooter-drain"


@pytest.mark.parametrize(
    "address, city",
    [
        ("12 Main St, Austin, TX 78701, USA", "Austin"),
        ("400 Elm Ave, San Luis Obispo, CA 93401", "San Luis Obispo"),
        ("Somewhere without a region", "your area"),
        (None, "your area"),
        ("", "your area"),
    ],
)
def test_extract_city(address, city):
    assert renderer.extract_city(address) == city


@pytest.mark.parametrize(
    "category, template",
    [
        ("Landscaping", "landscaper"),
        ("lawn care", "landscaper"),
        ("handyman", "handyman"),
        ("appliance repair", "handyman"),
        ("plumber", "plumber"),
        ("house cleaner", "handyman"),
        ("maid service", "handyman"),
        ("pressure washing", "landscaper"),
        ("car wash", "landscaper"),
        ("electrician", "plumber"),
        ("", "plumber"),
        (None, "plumber"),
    ],
)
def test_template_name_for(category, template):
    assert renderer.template_name_for(category) == template


def test_pick_tagline_uses_injected_choice():
    assert renderer.pick_tagline("Landscaper", first_choice) == renderer.TAGLINES["landscaper"][0]
    assert renderer.pick_tagline("astrologer", first_choice) == renderer.TAGLINES["default"][0]


def test_reviews_html_renders_at_most_three():
    reviews = tuple(Review(author=f"Author {index}", rating=5, text=f"text {index}") for index in range(5))
    soup = BeautifulSoup(renderer.render_reviews_html(reviews), "html.parser")

    authors = [node.get_text() for node in soup.select(".review-author")]
    assert authors == ["— Author 0", "— Author 1", "— Author 2"]


def test_reviews_html_truncates_long_text_only():
    long_text = "x" * 300
    exact_text = "y" * renderer.REVIEW_TEXT_LIMIT
    reviews = (
        Review(author="Long", rating=4, text=long_text),
        Review(author="Exact", rating=4, text=exact_text),
    )
    soup = BeautifulSoup(renderer.render_reviews_html(reviews), "html.parser")
    texts = [node.get_text() for node in soup.select(".review-text")]

    assert texts[0] == f'"{"x" * renderer.REVIEW_TEXT_LIMIT}..."'
    assert texts[1] == f'"{exact_text}"'


def test_reviews_html_escapes_markup():
    html = renderer.render_reviews_html((Review(author="<b>Eve</b>", rating=1, text="<script>x</script>"),))
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_hours_html_splits_on_first_separator():
    html = renderer.render_hours_html(["Monday: 8:00 AM – 5:00 PM", "Sunday"])
    soup = BeautifulSoup(html, "html.parser")
    rows = [[span.get_text() for span in item.find_all("span")] for item in soup.find_all("li")]

    assert rows == [["Monday", "8:00 AM – 5:00 PM"], ["Sunday", "Closed"]]


def test_hours_html_empty():
    assert renderer.render_hours_html(None) == ""
    assert renderer.render_hours_html(()) == ""


def test_generate_site_end_to_end_conditionals(templates_dir):
    site = renderer.generate_site(
        make_business(),
        templates_dir=templates_dir,
        activate_base_url="https://example.test",
        choose=first_choice,
        year=2030,
    )
    soup = BeautifulSoup(site.html, "html.parser")

    assert site.slug == "joe-s-plumbing"
    assert site.business.name == "Joe's Plumbing"
    assert soup.find(id="phone").get_text() == "Call 555-1234"
    assert soup.find(id="rating").get_text() == "★★★★½ 4.5"
    assert soup.find(id="reviews") is None
    assert soup.find(id="hours") is None
    assert "{{" not in site.html
    assert soup.find(id="activate")["href"] == "https://example.test/activate/joe-s-plumbing"
    assert soup.find(id="activate").get_text() == renderer.TAGLINES["plumber"][0]
    assert soup.find(id="maps")["href"] == "#"
    assert soup.find(id="maps").get_text() == "your area"
    assert soup.find(id="year").get_text() == "2030"
    assert soup.find(id="count").get_text() == "0"


def test_generate_site_with_all_fields(templates_dir):
    business = make_business(
        phone=None,
        rating=None,
        address="1 Oak St, Austin, TX 78701",
        reviews=(Review(author="Ann", rating=5, text="Great"),),
        review_count=12,
        hours=("Monday: 9-5",),
        google_maps_url="https://maps.google.com/?cid=9",
    )
    site = renderer.generate_site(business, templates_dir=templates_dir, choose=first_choice, year=2030)
    soup = BeautifulSoup(site.html, "html.parser")

    assert soup.find(id="phone") is None
    assert soup.find(id="rating") is None
    assert "Great" in soup.find(id="reviews").get_text()
    assert soup.find(id="hours").find("li") is not None
    assert soup.find(id="maps")["href"] == "https://maps.google.com/?cid=9"
    assert soup.find(id="maps").get_text() == "Austin"
    assert soup.find(id="count").get_text() == "12"


def test_template_override_and_fallback(templates_dir):
    landscaped = renderer.generate_site(make_business(), "landscaper", templates_dir=templates_dir, choose=first_choice)
    assert landscaped.html == "landscaper Joe's Plumbing"

    fallback = renderer.generate_site(make_business(category="handyman"), templates_dir=templates_dir, choose=first_choice)
    assert fallback.html.startswith("<h1>Joe's Plumbing</h1>")


def test_missing_default_template_raises(tmp_path):
    with pytest.raises(renderer.TemplateNotFoundError):
        renderer.generate_site(make_business(), templates_dir=tmp_path, choose=first_choice)


@pytest.mark.parametrize("template_name", ["plumber", "landscaper", "handyman"])
def test_bundled_templates_render_cleanly(template_name):
    business = make_business(
        reviews=(Review(author="Ann", rating=5, text="Great"),),
        hours=("Monday: 9-5",),
    )
    site = renderer.generate_site(business, template_name, choose=first_choice)

    assert "{{" not in site.html
    assert "Joe's Plumbing" in site.html
    assert "/activate/joe-s-plumbing" in site.html


def test_generate_site_escapes_business_text(templates_dir):
    business = make_business(
        name="Tom & Jerry <Pipes>",
        address="1 Oak St, Austin, TX 78701",
        hours=("Monday: 9 <am>",),
        google_maps_url="https://maps.google.com/?cid=9&hl=en",
    )
    site = renderer.generate_site(business, templates_dir=templates_dir, choose=first_choice, year=2030)
    soup = BeautifulSoup(site.html, "html.parser")

    assert "<h1>Tom &amp; Jerry &lt;Pipes&gt;</h1>" in site.html
    assert soup.find("h1").get_text() == "Tom & Jerry <Pipes>"
    assert soup.find(id="hours").find_all("span")[1].get_text() == "9 <am>"
    assert 'href="https://maps.google.com/?cid=9&amp;hl=en"' in site.html
    assert soup.find(id="maps")["href"] == "https://maps.google.com/?cid=9&hl=en"

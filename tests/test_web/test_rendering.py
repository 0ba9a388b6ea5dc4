"""Tests for template filters and notice redirects."""

from storefront.web.rendering import highlight, redirect_with_notice, stars


class TestHighlight:
    def test_wraps_every_occurrence_case_insensitively(self):
        html = str(highlight("Blender first, blender always", "Blender"))
        assert html.count('<span class="highlight">') == 2
        assert '<span class="highlight">blender</span>' in html

    def test_escapes_surrounding_text(self):
        html = str(highlight("<b>Blender</b>", "Blender"))
        assert html == '&lt;b&gt;<span class="highlight">Blender</span>&lt;/b&gt;'

    def test_no_word(self):
        assert str(highlight("a < b", "")) == "a &lt; b"


class TestStars:
    def test_rating(self):
        assert stars(3) == "★★★☆☆"

    def test_clamped(self):
        assert stars(9) == "★★★★★"
        assert stars(None) == "☆☆☆☆☆"


class TestRedirectWithNotice:
    def test_appends_notice(self):
        response = redirect_with_notice("/admin?tab=faqs", "Added!")
        assert response.status_code == 303
        assert response.headers["location"] == "/admin?tab=faqs&notice=Added%21&level=success"

    def test_error_level_and_params(self):
        response = redirect_with_notice("/auth/login", "Nope", level="error", next="/admin")
        assert response.headers["location"] == "/auth/login?next=%2Fadmin&notice=Nope&level=error"

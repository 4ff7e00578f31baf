from types import SimpleNamespace

import pytest

from jobboard_scraper.models.errors import ContentGenerationError
from jobboard_scraper.models.job_models import JobRecord
from jobboard_scraper.service.content_service import (
    ArticleWriter,
    build_excerpt,
    clean_article_html,
    derive_title,
    wrap_html_document,
)

DIVIDER = '<div class="divider">Shape</div>'


class FakeResponses:
    def __init__(self, outputs):
        self.outputs = list(outputs)
        self.calls = []

    def create(self, model, input):
        self.calls.append({"model": model, "input": input})
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return SimpleNamespace(output_text=output)


class FakeOpenAI:
    def __init__(self, *outputs):
        self.responses = FakeResponses(outputs)


def make_job(**fields) -> JobRecord:
    data = {
        "job_id": "rozee-1",
        "source": "rozee",
        "search_role": "Developer",
        "job_role": "Backend Engineer",
        "company_name": "Acme",
    }
    data.update(fields)
    return JobRecord(**data)


def test_clean_article_html_drops_placeholder_sections_and_their_dividers():
    html = (
        "<article><h1>Backend Engineer</h1>"
        f"{DIVIDER}<h2>About the Role</h2><p>Build APIs.</p>"
        f"{DIVIDER}<h2>Key Traits</h2><p>Not provided</p>"
        f"{DIVIDER}<h2>Why Join Acme</h2><ul><li> </li></ul>"
        f"{DIVIDER}<h2>How to Apply</h2><p><a href=\"https://apply.test\">Apply Now</a></p>"
        "</article>"
    )

    cleaned = clean_article_html(html)

    assert "Key Traits" not in cleaned
    assert "Why Join Acme" not in cleaned
    assert cleaned.count(DIVIDER) == 2
    assert cleaned == (
        "<article><h1>Backend Engineer</h1>"
        f"{DIVIDER}<h2>About the Role</h2><p>Build APIs.</p>"
        f"{DIVIDER}<h2>How to Apply</h2><p><a href=\"https://apply.test\">Apply Now</a></p>"
        "</article>"
    )


def test_clean_article_html_wraps_bare_markup():
    cleaned = clean_article_html("```html\n<h1>Title</h1>\n<h2>About the Role</h2><p>Text</p>\n```")

    assert cleaned.startswith("<article>")
    assert cleaned.endswith("</article>")
    assert "```" not in cleaned


def test_build_excerpt_is_plain_text_and_bounded():
    html = "<article><h1>Title</h1><p>" + "word " * 100 + "</p></article>"

    excerpt = build_excerpt(html)

    assert len(excerpt) == 280
    assert "<" not in excerpt
    assert build_excerpt("<p> </p>") == ""


def test_derive_title_and_document_wrapper():
    assert derive_title(make_job()) == "Backend Engineer"

    document = wrap_html_document('Dev & "Ops"', "<article></article>")

    assert "<title>Dev &amp; &quot;Ops&quot;</title>" in document
    assert document.startswith("<!DOCTYPE html>")


def test_article_writer_retries_once_then_succeeds():
    client = FakeOpenAI(RuntimeError("rate limited"), "<article><h1>Backend Engineer</h1></article>")
    writer = ArticleWriter(client=client, model="gpt-test")

    article = writer.write(make_job())

    assert article.title == "Backend Engineer"
    assert article.html == "<article><h1>Backend Engineer</h1></article>"
    assert len(client.responses.calls) == 2
    assert client.responses.calls[0]["model"] == "gpt-test"
    assert '"jobId": "rozee-1"' in client.responses.calls[0]["input"]
    assert '"role": "Developer"' in client.responses.calls[0]["input"]


def test_article_writer_gives_up_after_two_attempts():
    writer = ArticleWriter(client=FakeOpenAI(RuntimeError("down"), RuntimeError("still down")))

    with pytest.raises(ContentGenerationError):
        writer.write(make_job())


def test_article_writer_without_key_is_not_configured():
    writer = ArticleWriter(api_key="")

    assert writer.configured is False
    with pytest.raises(ContentGenerationError):
        writer.write(make_job())


def test_clean_article_html_drops_wrapped_sections_whole():
    html = (
        "<article><section><h2>About</h2><p>Build APIs.</p></section>"
        "<section><h2>Benefits</h2><p>Not provided</p></section></article>"
    )

    cleaned = clean_article_html(html)

    assert cleaned == "<article><section><h2>About</h2><p>Build APIs.</p></section></article>"
    assert cleaned.count("<section>") == cleaned.count("</section>") == 1


def test_clean_article_html_keeps_entities_encoded_and_drops_leading_divider():
    html = f"<article>{DIVIDER}<h2>Pay &amp; Perks</h2><p>Fuel &amp; medical</p>{DIVIDER}</article>"

    cleaned = clean_article_html(html)

    assert cleaned == "<article><h2>Pay &amp; Perks</h2><p>Fuel &amp; medical</p></article>"

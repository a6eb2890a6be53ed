"""Tests for the storybook PDF builder."""

import base64
from io import BytesIO
from unittest import mock

import pytest
import requests
from reportlab.pdfbase import pdfmetrics

from bedtime_books.common.schema import Page, Story
from bedtime_books.pdf_generation import StorybookPDFBuilder, story_pdf_filename
from bedtime_books.pdf_generation.builder import FAILED_IMAGE_CAPTION, MOCK_IMAGE_CAPTION, fit_title

from conftest import (
    ANA_TEXTS,
    image_xobjects,
    make_image_bytes,
    make_story,
    page_text,
    png_data_uri,
    read_pdf,
)

SVG_URI = "data:image/svg+xml;utf8,%3Csvg%20xmlns%3D%22http%3A%2F%2Fwww.w3.org%2F2000%2Fsvg%22%2F%3E"
LONG_TITLE = "The Very Sleepy Dragon Who Learned to Share His Shiny Treasure With All Friends"
TEXT_WIDTH = 612 - 2 * 36


def _with_first_image(url, texts=ANA_TEXTS[:8]):
    return make_story(image_urls=[url] + [None] * (len(texts) - 1), texts=texts)


@pytest.mark.parametrize("page_count", [8, 10, 12])
def test_one_sheet_per_page(builder, page_count):
    texts = [f"Page text number {i}." for i in range(page_count)]
    story = make_story(texts=texts)

    reader = read_pdf(builder.render(story))

    assert len(reader.pages) == page_count


def test_output_is_letter_sized(builder, story):
    reader = read_pdf(builder.render(story))

    box = reader.pages[0].mediabox
    assert (float(box.width), float(box.height)) == (612.0, 792.0)


def test_title_only_on_first_sheet(builder, story):
    reader = read_pdf(builder.render(story))

    assert "Kindness Adventure" in page_text(reader, 0)
    for index in range(1, len(reader.pages)):
        assert "Kindness Adventure" not in page_text(reader, index)


def test_empty_title_falls_back_to_default_heading(builder):
    story = Story.model_construct(title="", pages=make_story().pages)

    reader = read_pdf(builder.render(story))

    assert "Story" in page_text(reader, 0)


def test_page_text_and_numbers(builder, story):
    reader = read_pdf(builder.render(story))

    for index, text in enumerate(ANA_TEXTS):
        extracted = page_text(reader, index)
        assert text in extracted
        assert str(index + 1) in extracted.split()


def test_ana_scenario_with_mock_images(builder):
    story = make_story(image_urls=[SVG_URI] * len(ANA_TEXTS))

    reader = read_pdf(builder.render(story))

    assert len(reader.pages) == 10
    first = page_text(reader, 0)
    assert "Kindness Adventure" in first
    assert MOCK_IMAGE_CAPTION in first
    assert "Ana shares her toy." in first
    assert "10" in page_text(reader, 9).split()


def test_png_data_uri_embeds_image(builder):
    story = _with_first_image(png_data_uri())

    reader = read_pdf(builder.render(story))

    assert len(image_xobjects(reader.pages[0])) == 1
    assert image_xobjects(reader.pages[1]) == []


def test_jpeg_data_uri_embeds_image(builder):
    jpeg = make_image_bytes(color="blue", fmt="JPEG")
    story = _with_first_image("data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii"))

    reader = read_pdf(builder.render(story))

    assert len(image_xobjects(reader.pages[0])) == 1


@pytest.mark.parametrize(
    "url",
    [
        "data:image/png;base64,!!!not-base64!!!",
        "data:image/png;base64," + base64.b64encode(b"definitely not a png").decode("ascii"),
    ],
)
def test_undecodable_data_uri_leaves_region_blank(builder, url):
    reader = read_pdf(builder.render(_with_first_image(url)))

    text = page_text(reader, 0)
    assert image_xobjects(reader.pages[0]) == []
    assert FAILED_IMAGE_CAPTION not in text
    assert MOCK_IMAGE_CAPTION not in text
    assert "Ana shares her toy." in text


def test_absent_image_draws_nothing(builder, story):
    reader = read_pdf(builder.render(story))

    assert image_xobjects(reader.pages[0]) == []
    assert FAILED_IMAGE_CAPTION not in page_text(reader, 0)


def test_remote_image_is_fetched_and_drawn(builder):
    response = mock.Mock(ok=True, status_code=200, content=make_image_bytes("green"))
    with mock.patch("requests.get", return_value=response) as mock_get:
        pdf_bytes = builder.render(_with_first_image("https://images.example.com/1.png"))

    mock_get.assert_called_once_with("https://images.example.com/1.png", timeout=None)
    assert len(image_xobjects(read_pdf(pdf_bytes).pages[0])) == 1


def test_remote_image_timeout_is_forwarded():
    builder = StorybookPDFBuilder(request_timeout=5.0)
    response = mock.Mock(ok=True, status_code=200, content=make_image_bytes())
    with mock.patch("requests.get", return_value=response) as mock_get:
        builder.render(_with_first_image("http://images.example.com/1.png"))

    assert mock_get.call_args.kwargs["timeout"] == 5.0


def test_remote_image_bad_status_leaves_region_blank(builder):
    response = mock.Mock(ok=False, status_code=404, content=b"")
    with mock.patch("requests.get", return_value=response):
        reader = read_pdf(builder.render(_with_first_image("https://images.example.com/gone.png")))

    assert image_xobjects(reader.pages[0]) == []
    assert FAILED_IMAGE_CAPTION not in page_text(reader, 0)


def test_unreachable_remote_image_draws_placeholder(builder):
    with mock.patch("requests.get", side_effect=requests.ConnectionError("no route to host")):
        reader = read_pdf(builder.render(_with_first_image("https://unreachable.invalid/1.png")))

    assert len(reader.pages) == 8
    assert FAILED_IMAGE_CAPTION in page_text(reader, 0)


def test_remote_body_that_is_not_an_image_draws_placeholder(builder):
    response = mock.Mock(ok=True, status_code=200, content=b"<html>oops</html>")
    with mock.patch("requests.get", return_value=response):
        reader = read_pdf(builder.render(_with_first_image("https://images.example.com/page")))

    assert FAILED_IMAGE_CAPTION in page_text(reader, 0)


def test_local_file_reference_is_drawn(builder, tmp_path):
    image_path = tmp_path / "page1.png"
    image_path.write_bytes(make_image_bytes("purple"))

    reader = read_pdf(builder.render(_with_first_image(str(image_path))))

    assert len(image_xobjects(reader.pages[0])) == 1


def test_missing_local_file_draws_placeholder(builder, tmp_path):
    reader = read_pdf(builder.render(_with_first_image(str(tmp_path / "missing.png"))))

    assert FAILED_IMAGE_CAPTION in page_text(reader, 0)


def test_long_text_is_not_truncated(builder):
    long_text = ("Ana hums a very long and winding lullaby about stars " * 4)[:220].strip()
    story = make_story(texts=[long_text] * 8)

    reader = read_pdf(builder.render(story))

    extracted = " ".join(page_text(reader, 0).split())
    assert long_text.split()[-1] in extracted
    assert len(reader.pages) == 8


def test_markup_characters_in_text_are_rendered_literally(builder):
    texts = ["Ana & Leo share <three> cookies."] + ANA_TEXTS[1:8]

    reader = read_pdf(builder.render(make_story(texts=texts)))

    assert "Ana & Leo share <three> cookies." in page_text(reader, 0)


def test_rendering_twice_gives_same_pages_and_text():
    story = make_story(image_urls=[png_data_uri(), SVG_URI] + [None] * 8)
    first = read_pdf(StorybookPDFBuilder().render(story))
    second = read_pdf(StorybookPDFBuilder().render(story))

    assert len(first.pages) == len(second.pages)
    for index in range(len(first.pages)):
        assert page_text(first, index) == page_text(second, index)


def test_invariant_mode_is_byte_identical(story):
    builder = StorybookPDFBuilder(invariant=True)

    assert builder.render(story) == builder.render(story)


def test_build_writes_to_path(builder, story, tmp_path):
    output = tmp_path / "exports" / "ana.pdf"

    builder.build(story, output)

    assert output.read_bytes().startswith(b"%PDF")


def test_build_writes_to_stream(builder, story):
    buffer = BytesIO()

    builder.build(story, buffer)

    assert len(read_pdf(buffer.getvalue()).pages) == 10


@pytest.mark.parametrize(
    "title, expected",
    [
        ("My/Story: Part 1?", "My_Story__Part_1_.pdf"),
        ("Ana's Kindness Adventure", "Ana_s_Kindness_Adventure.pdf"),
        ("bed-time_story.v2", "bed-time_story.v2.pdf"),
        ("Zoë", "Zo_.pdf"),
        ("", "story.pdf"),
        (None, "story.pdf"),
    ],
)
def test_story_pdf_filename(title, expected):
    assert story_pdf_filename(title) == expected


def test_page_model_accepts_camel_case_image_url():
    page = Page.model_validate(
        {"text": "Hello moon.", "image_prompt": "a calm moon", "imageUrl": "https://x.example/a.png"}
    )

    assert page.image_url == "https://x.example/a.png"


def test_short_title_stays_on_one_line_at_full_size():
    assert fit_title("Ana's Kindness Adventure", TEXT_WIDTH) == (26, ["Ana's Kindness Adventure"])


def test_long_title_wraps_inside_margins():
    font_size, lines = fit_title(LONG_TITLE, TEXT_WIDTH)

    assert font_size == 14
    assert len(lines) == 2
    assert " ".join(lines) == LONG_TITLE
    for line in lines:
        assert pdfmetrics.stringWidth(line, "Helvetica-Bold", font_size) <= TEXT_WIDTH


def test_unbroken_wide_title_is_split_between_characters():
    title = "W" * 80

    font_size, lines = fit_title(title, TEXT_WIDTH)

    assert len(lines) > 1
    assert "".join(lines) == title
    for line in lines:
        assert pdfmetrics.stringWidth(line, "Helvetica-Bold", font_size) <= TEXT_WIDTH


def test_long_title_renders_every_line_above_the_image(builder):
    story = make_story(title=LONG_TITLE, image_urls=[png_data_uri()] + [None] * 9)

    reader = read_pdf(builder.render(story))

    text = page_text(reader, 0)
    _, lines = fit_title(LONG_TITLE, TEXT_WIDTH)
    for line in lines:
        assert line in text
    assert len(image_xobjects(reader.pages[0])) == 1


def test_local_files_can_be_disabled(tmp_path):
    image_path = tmp_path / "secret.png"
    image_path.write_bytes(make_image_bytes("purple"))
    builder = StorybookPDFBuilder(allow_local_files=False)

    reader = read_pdf(builder.render(_with_first_image(str(image_path))))

    assert image_xobjects(reader.pages[0]) == []
    assert FAILED_IMAGE_CAPTION in page_text(reader, 0)

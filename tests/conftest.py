import base64
import json
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pypdf import PdfReader

from bedtime_books.common import ChatResult, ImageResult, Settings
from bedtime_books.common.schema import Page, Story, StoryRequest
from bedtime_books.pdf_generation import StorybookPDFBuilder
from bedtime_books.web import create_app

ANA_TEXTS = [
    "Ana shares her toy.",
    "Ana waters the sleepy garden.",
    "Ana helps a lost puppy find home.",
    "Ana reads a book to her little brother.",
    "Ana gives grandma a warm hug.",
    "Ana says thank you to the baker.",
    "Ana tidies up the playroom.",
    "Ana waves to the moon.",
    "Ana sings a soft lullaby.",
    "Ana drifts off to sweet dreams.",
]


def make_story(title="Ana's Kindness Adventure", image_urls=None, texts=None):
    texts = texts or ANA_TEXTS
    image_urls = image_urls or [None] * len(texts)
    pages = [
        Page(text=text, image_prompt=f"soft watercolor scene of {text}", image_url=url)
        for text, url in zip(texts, image_urls)
    ]
    return Story(title=title, pages=pages)


def make_image_bytes(color="red", size=(64, 48), fmt="PNG"):
    image = Image.new("RGB", size, color=color)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def png_data_uri(color="red"):
    return "data:image/png;base64," + base64.b64encode(make_image_bytes(color)).decode("ascii")


def read_pdf(pdf_bytes):
    return PdfReader(BytesIO(pdf_bytes))


def page_text(reader, index):
    return reader.pages[index].extract_text() or ""


def image_xobjects(pdf_page):
    resources = pdf_page.get("/Resources")
    if resources is None:
        return []
    xobjects = resources.get_object().get("/XObject")
    if xobjects is None:
        return []
    return [
        name
        for name, obj in xobjects.get_object().items()
        if obj.get_object().get("/Subtype") == "/Image"
    ]


class FakeCompletion:
    """Stands in for the LiteLLM completion helper."""

    def __init__(self, payload=None, text=None, error=None):
        self.text = text if text is not None else json.dumps(payload or {})
        self.error = error
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return ChatResult(text=self.text, raw=None)


class FakeImageFn:
    """Stands in for the LiteLLM image generation helper."""

    def __init__(self, url="https://images.example.com/page.png", b64_json=None, fail_on=()):
        self.url = url
        self.b64_json = b64_json
        self.fail_on = set(fail_on)
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if len(self.calls) in self.fail_on:
            raise RuntimeError("content policy violation")
        return ImageResult(url=self.url, b64_json=self.b64_json, raw=None)


class FakeReplicateClient:
    def __init__(self, output="https://replicate.delivery/page.png", error=None):
        self.output = output
        self.error = error
        self.calls = []

    def run(self, model, input):
        self.calls.append((model, input))
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def story():
    return make_story()


@pytest.fixture
def story_request():
    return StoryRequest(
        child_name="Ana",
        age=5,
        pronouns="she/her",
        minutes=5,
        topic="kindness",
    )


@pytest.fixture
def story_payload():
    return {
        "title": "Ana's Kindness Adventure",
        "pages": [
            {"text": text, "image_prompt": f"soft watercolor scene of {text}"}
            for text in ANA_TEXTS
        ],
    }


@pytest.fixture
def builder():
    return StorybookPDFBuilder(invariant=True)


@pytest.fixture
def mock_settings():
    return Settings(mock_ai=True, mock_images=True)


@pytest.fixture(name="client")
def client_fixture(mock_settings):
    app = create_app(mock_settings)
    with TestClient(app) as client:
        yield client

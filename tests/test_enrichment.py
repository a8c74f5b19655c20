from types import SimpleNamespace

import openai

from shelf_scanner.api.enrichment import EnrichmentClient, enrich_books
from shelf_scanner.core.models import BookDetection


class FakeCompletions:
    def __init__(self, answers):
        self.answers = answers
        self.prompts = []

    def create(self, model, messages):
        prompt = messages[0]["content"]
        self.prompts.append(prompt)
        for title, answer in self.answers.items():
            if f"Title: {title}\n" in prompt:
                if isinstance(answer, Exception):
                    raise answer
                return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=answer))])
        raise AssertionError("unexpected prompt")


def make_client(answers):
    completions = FakeCompletions(answers)
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return EnrichmentClient(client=fake), completions


def test_lookup_parses_fenced_json():
    client, _ = make_client({
        "Dune": '```json\n{"authors": ["Frank Herbert"], "isbn": "9780441013593", '
                '"publisher": "Ace", "publicationDate": 1965, "edition": null}\n```'
    })
    details = client.lookup("Dune", "Frank Herbert")
    assert details.to_dict() == {
        "authors": "Frank Herbert",
        "isbn": "9780441013593",
        "publisher": "Ace",
        "publicationDate": "1965",
        "edition": "",
    }


def test_each_distinct_title_is_looked_up_once():
    client, completions = make_client({"A": '{"isbn": "1"}', "B": '{"isbn": "2"}'})
    books = [
        BookDetection(title="A", sources=["1.jpg"]),
        BookDetection(title="B", sources=["1.jpg"]),
        BookDetection(title="A", sources=["2.jpg"]),
    ]
    enriched = enrich_books(books, client)
    assert list(enriched) == ["A", "B"]
    assert enriched["B"]["isbn"] == "2"
    assert len(completions.prompts) == 2


def test_failures_are_isolated_per_title():
    client, _ = make_client({
        "Bad JSON": "I could not find this book.",
        "Server Down": openai.OpenAIError("boom"),
        "Good": '{"publisher": "Penguin"}',
    })
    books = [BookDetection(title=t) for t in ("Bad JSON", "Server Down", "Good")]
    enriched = enrich_books(books, client)
    assert enriched["Bad JSON"] == {"error": True}
    assert enriched["Server Down"] == {"error": True}
    assert enriched["Good"]["publisher"] == "Penguin"


def test_missing_author_is_marked_unknown():
    client, completions = make_client({"Untitled": "{}"})
    client.lookup("Untitled", "")
    assert "Author: unknown" in completions.prompts[0]

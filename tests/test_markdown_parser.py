from knife4j_mcp.parser.base import UNKNOWN
from knife4j_mcp.parser.markdown import extract_modules

SAMPLE = """# Petstore

Intro text.

## pets

Everything about your pets

### List all pets

```http
GET /pets
```

### Create a pet

```http
POST /pets
```

**Request Body**

## users

### Get User

```http
GET /users/{id}
```

### Legacy endpoint

No http block here.

## Schemas

This document defines 2 schema(s).
"""


class TestExtractModules:
    def test_modules_in_document_order(self):
        modules = extract_modules(SAMPLE)
        assert [m.name for m in modules] == ["pets", "users", "Schemas"]

    def test_module_description(self):
        modules = extract_modules(SAMPLE)
        assert modules[0].description == "Everything about your pets"

    def test_description_empty_when_module_starts_with_api(self):
        modules = extract_modules(SAMPLE)
        assert modules[1].description == ""

    def test_description_without_apis_runs_to_module_end(self):
        modules = extract_modules(SAMPLE)
        assert modules[2].description == "This document defines 2 schema(s)."

    def test_apis_with_method_and_path(self):
        pets = extract_modules(SAMPLE)[0]
        assert [(a.name, a.method, a.path) for a in pets.apis] == [
            ("List all pets", "GET", "/pets"),
            ("Create a pet", "POST", "/pets"),
        ]

    def test_summary_equals_name(self):
        for module in extract_modules(SAMPLE):
            for api in module.apis:
                assert api.summary == api.name

    def test_missing_http_block_uses_unknown(self):
        users = extract_modules(SAMPLE)[1]
        legacy = users.apis[1]
        assert legacy.method == UNKNOWN
        assert legacy.path == UNKNOWN

    def test_module_without_apis_has_empty_list(self):
        schemas = extract_modules(SAMPLE)[2]
        assert schemas.apis == []

    def test_apis_stay_within_their_module(self):
        modules = extract_modules(SAMPLE)
        assert [a.name for a in modules[1].apis] == ["Get User", "Legacy endpoint"]

    def test_idempotent(self):
        first = [m.model_dump() for m in extract_modules(SAMPLE)]
        second = [m.model_dump() for m in extract_modules(SAMPLE)]
        assert first == second

    def test_crlf_markdown(self):
        text = SAMPLE.replace("\n", "\r\n")
        modules = extract_modules(text)
        assert [m.name for m in modules] == ["pets", "users", "Schemas"]
        assert modules[0].description == "Everything about your pets"
        assert modules[0].apis[0].path == "/pets"

    def test_deeper_headings_are_not_apis(self):
        text = "## m\n\n### a\n\n```http\nGET /a\n```\n\n#### Notes\n\ntext\n"
        modules = extract_modules(text)
        assert [a.name for a in modules[0].apis] == ["a"]

    def test_no_modules(self):
        assert extract_modules("# Only a title\n\nSome text.") == []
        assert extract_modules("") == []

from knife4j_mcp.parser.markdown import extract_modules
from knife4j_mcp.parser.section import extract_section, get_api_details

DOC = """# Title

## User

User endpoints

### Create User

```http
POST /users
```

Creates a user.

### Get User

```http
GET /users/{id}
```

## Order

### Create Order

```http
POST /orders
```
"""


class TestExtractSection:
    def test_stops_before_next_heading_of_same_level(self):
        section = extract_section(DOC, "Create User", "###")
        assert section is not None
        assert section.content.startswith("### Create User")
        assert "Creates a user." in section.content
        assert "### Get User" not in section.content

    def test_runs_to_end_of_text_without_next_heading(self):
        section = extract_section(DOC, "Order", "##")
        assert section is not None
        assert section.end == len(DOC)
        assert section.content.endswith("```")

    def test_level_two_section_contains_nested_apis(self):
        section = extract_section(DOC, "User", "##")
        assert "### Create User" in section.content
        assert "### Get User" in section.content
        assert "## Order" not in section.content

    def test_start_index_points_at_heading(self):
        section = extract_section(DOC, "Get User", "###")
        assert DOC[section.start:].startswith("### Get User")

    def test_not_found(self):
        assert extract_section(DOC, "Delete User", "###") is None

    def test_case_sensitive(self):
        assert extract_section(DOC, "create user", "###") is None

    def test_name_is_literal_not_regex(self):
        text = "## a.b (v1)\n\ncontent\n\n## axb (v1)\n"
        section = extract_section(text, "a.b (v1)", "##")
        assert section.content == "## a.b (v1)\n\ncontent"
        assert extract_section("## axb\n", "a.b", "##") is None

    def test_heading_must_start_a_line(self):
        assert extract_section("text ### Create User\n", "Create User", "###") is None

    def test_heading_name_must_match_whole_line(self):
        assert extract_section("### Create Users\nbody\n", "Create User", "###") is None

    def test_trailing_spaces_after_heading_name(self):
        section = extract_section("## User \t\nbody\n## Next\n", "User", "##")
        assert section is not None
        assert section.content == "## User \t\nbody"

    def test_crlf_line_endings(self):
        text = "### Create User\r\nbody\r\n### Get User\r\nother\r\n"
        section = extract_section(text, "Create User", "###")
        assert section.content == "### Create User\r\nbody"

    def test_deeper_headings_do_not_end_section(self):
        text = "## User\n\n### Create User\n\nbody\n\n## Next\n"
        section = extract_section(text, "User", "##")
        assert "### Create User" in section.content


class TestGetApiDetails:
    def test_returns_api_section(self):
        details = get_api_details(DOC, "User", "Get User")
        assert details.startswith("### Get User")
        assert "GET /users/{id}" in details
        assert "## Order" not in details

    def test_api_is_looked_up_inside_its_module(self):
        assert get_api_details(DOC, "Order", "Create User") == "API not found in module Order: Create User"

    def test_indexed_names_resolve_despite_trailing_spaces(self):
        text = "## User \n\n### Get User  \n\n```http\nGET /users/{id}\n```\n"
        module = extract_modules(text)[0]
        assert (module.name, module.apis[0].name) == ("User", "Get User")
        details = get_api_details(text, module.name, module.apis[0].name)
        assert details.startswith("### Get User")
        assert "GET /users/{id}" in details

    def test_missing_module(self):
        assert get_api_details(DOC, "Billing", "Pay") == "Module not found: Billing"

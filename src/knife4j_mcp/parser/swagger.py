"""OpenAPI / Swagger to Markdown renderer.

Validates OpenAPI 3.x and Swagger 2.0 documents against pydantic models and
renders them as Markdown: one ``##`` section per tag and one ``###`` section
per operation, each carrying an ``http`` block with ``METHOD path``.

The renderer is strict. Anything it cannot model raises RenderError, which
the tolerant converter turns into a fallback.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from knife4j_mcp.errors import RenderError

from .detect import detect_version

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

LABELS = {
    "zhCN": {
        "version": "版本",
        "parameters": "请求参数",
        "request_body": "请求体",
        "responses": "响应",
        "name": "参数名",
        "in": "位置",
        "type": "类型",
        "required": "必填",
        "description": "说明",
        "status": "状态码",
        "schema": "数据结构",
        "yes": "是",
        "no": "否",
        "default_tag": "默认",
        "deprecated": "已废弃",
    },
    "en": {
        "version": "Version",
        "parameters": "Parameters",
        "request_body": "Request Body",
        "responses": "Responses",
        "name": "Name",
        "in": "In",
        "type": "Type",
        "required": "Required",
        "description": "Description",
        "status": "Status",
        "schema": "Schema",
        "yes": "yes",
        "no": "no",
        "default_tag": "Default",
        "deprecated": "Deprecated",
    },
}


class Reference(BaseModel):
    ref: str = Field(alias="$ref")


class Parameter(BaseModel):
    """A single operation parameter (query, path, header, cookie or body)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    location: str = Field(default="query", alias="in")
    required: bool = False
    description: str | None = None
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    type: str | None = None  # Swagger 2 carries the type on the parameter


class Response(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    description: str | None = None
    content: dict[str, Any] = {}
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")


class Operation(BaseModel):
    """One HTTP method under a path."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    tags: list[str] = []
    summary: str | None = None
    description: str | None = None
    operation_id: str | None = Field(default=None, alias="operationId")
    parameters: list[Reference | Parameter] = []
    request_body: Reference | dict[str, Any] | None = Field(default=None, alias="requestBody")
    responses: dict[str | int, Reference | Response] = {}
    deprecated: bool = False

    @model_validator(mode="after")
    def _check_extensions(self):
        for key, value in (self.model_extra or {}).items():
            if key.startswith("x-") and isinstance(value, (dict, list)):
                raise ValueError(f"unsupported structured vendor extension {key!r}")
        return self


class Tag(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: str | None = None


class Info(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str
    version: str = ""
    description: str | None = None


class OpenApiDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    info: Info
    paths: dict[str, dict[str, Any]] = {}
    tags: list[Tag] = []


def render_markdown(document: Any, lang: str = "zhCN") -> str:
    """Render an OpenAPI/Swagger document as Markdown.

    Raises RenderError if the document does not fit the OpenAPI models.
    """
    labels = LABELS.get(lang)
    if labels is None:
        raise RenderError(f"Unsupported locale: {lang}")
    if detect_version(document) == "unknown":
        raise RenderError("Not an OpenAPI 3.x or Swagger 2.0 document")

    _check_refs(document)

    try:
        doc = OpenApiDocument.model_validate(document)
        groups = _group_operations(doc, labels["default_tag"])
    except ValidationError as e:
        raise RenderError(f"Invalid OpenAPI document: {e.error_count()} validation error(s): {e}") from e

    lines = [f"# {doc.info.title}", ""]
    if doc.info.description:
        lines += [doc.info.description.strip(), ""]
    if doc.info.version:
        lines += [f"**{labels['version']}:** {doc.info.version}", ""]

    tag_descriptions = {t.name: t.description for t in doc.tags}
    for tag, operations in groups.items():
        lines += [f"## {tag}", ""]
        if tag_descriptions.get(tag):
            lines += [tag_descriptions[tag].strip(), ""]
        for method, path, op in operations:
            lines += _render_operation(method, path, op, labels)

    return "\n".join(lines).rstrip() + "\n"


def _check_refs(node: Any) -> None:
    """Reject ``$ref`` pointers with non-ASCII characters."""
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str) and not value.isascii():
                raise RenderError(f"Cannot resolve non-ASCII $ref: {value}")
            _check_refs(value)
    elif isinstance(node, list):
        for item in node:
            _check_refs(item)


def _group_operations(doc: OpenApiDocument, default_tag: str) -> dict[str, list[tuple[str, str, Operation]]]:
    """Group operations by their first tag; declared tags come first."""
    groups: dict[str, list[tuple[str, str, Operation]]] = {t.name: [] for t in doc.tags}
    for path, item in doc.paths.items():
        for method in HTTP_METHODS:
            if method not in item:
                continue
            op = Operation.model_validate(item[method])
            tag = op.tags[0] if op.tags else default_tag
            groups.setdefault(tag, []).append((method.upper(), path, op))
    return {tag: ops for tag, ops in groups.items() if ops}


def _render_operation(method: str, path: str, op: Operation, labels: dict[str, str]) -> list[str]:
    title = op.summary or op.operation_id or f"{method} {path}"
    lines = [f"### {title.strip()}", "", "```http", f"{method} {path}", "```", ""]

    if op.deprecated:
        lines += [f"> {labels['deprecated']}", ""]
    if op.description:
        lines += [op.description.strip(), ""]

    params = [p for p in op.parameters if isinstance(p, Parameter) and p.location != "body"]
    refs = [p for p in op.parameters if isinstance(p, Reference)]
    if params or refs:
        lines += [
            f"**{labels['parameters']}**",
            "",
            f"| {labels['name']} | {labels['in']} | {labels['type']} | {labels['required']} | {labels['description']} |",
            "| --- | --- | --- | --- | --- |",
        ]
        for p in params:
            param_type = p.type or _schema_type(p.schema_)
            required = labels["yes"] if p.required else labels["no"]
            lines.append(f"| {_cell(p.name)} | {p.location} | {param_type} | {required} | {_cell(p.description)} |")
        for r in refs:
            lines.append(f"| `{_ref_name(r.ref)}` | - | - | - | - |")
        lines.append("")

    body = _request_body(op)
    if body:
        lines += [f"**{labels['request_body']}**", "", body, ""]

    if op.responses:
        lines += [
            f"**{labels['responses']}**",
            "",
            f"| {labels['status']} | {labels['description']} | {labels['schema']} |",
            "| --- | --- | --- |",
        ]
        for status, resp in op.responses.items():
            if isinstance(resp, Reference):
                lines.append(f"| {status} | - | `{_ref_name(resp.ref)}` |")
            else:
                lines.append(f"| {status} | {_cell(resp.description)} | {_response_schema(resp)} |")
        lines.append("")

    return lines


def _request_body(op: Operation) -> str:
    for p in op.parameters:
        if isinstance(p, Parameter) and p.location == "body":
            return f"`application/json`: `{_schema_type(p.schema_)}`"

    body = op.request_body
    if body is None:
        return ""
    if isinstance(body, Reference):
        return f"`{_ref_name(body.ref)}`"

    content = body.get("content") or {}
    for content_type in ("application/json", "multipart/form-data"):
        if content_type in content:
            return f"`{content_type}`: `{_schema_type(content[content_type].get('schema'))}`"
    # Fallback: first declared media type
    for content_type, media in content.items():
        return f"`{content_type}`: `{_schema_type((media or {}).get('schema'))}`"
    return ""


def _response_schema(resp: Response) -> str:
    if resp.schema_:
        return f"`{_schema_type(resp.schema_)}`"
    for media in resp.content.values():
        schema = (media or {}).get("schema")
        if schema:
            return f"`{_schema_type(schema)}`"
    return "-"


def _schema_type(schema: dict[str, Any] | None) -> str:
    if not schema:
        return "string"
    if "$ref" in schema:
        return _ref_name(schema["$ref"])
    if schema.get("type") == "array":
        return f"array[{_schema_type(schema.get('items'))}]"
    return str(schema.get("type", "object"))


def _ref_name(ref: str) -> str:
    """'#/components/schemas/User' -> 'User'."""
    return ref.rsplit("/", 1)[-1]


def _cell(text: str | None) -> str:
    if not text:
        return ""
    return text.replace("|", "\\|").replace("\r", " ").replace("\n", " ").strip()

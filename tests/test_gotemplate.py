import pytest

from krmkit.gotemplate import Template, TemplateError


def render(text, data, name="t"):
    return Template(name).parse(text).execute(data)


def test_plain_text_round_trips():
    text = "just some text\nwith lines"
    assert render(text, {}) == text


def test_field_substitution_uses_params():
    assert render("{{.host}}", {"host": "db.example.com"}) == "db.example.com"


def test_nested_field():
    assert render("{{.a.b}}", {"a": {"b": "inner"}}) == "inner"


def test_missing_key_prints_no_value():
    assert render("{{.missing}}", {}) == "<no value>"


def test_if_else_selects_branch():
    text = "{{if .on}}{{.yes}}{{else}}{{.no}}{{end}}"
    assert render(text, {"on": True, "yes": "Y", "no": "N"}) == "Y"
    assert render(text, {"on": "", "yes": "Y", "no": "N"}) == "N"


def test_range_over_list_concatenates_items():
    items = ["a", "b", "c"]
    assert render("{{range .xs}}{{.}}{{end}}", {"xs": items}) == "".join(items)


def test_define_and_template_call():
    text = '{{define "inner"}}{{.v}}{{end}}{{template "inner" .}}'
    assert render(text, {"v": "value"}) == "value"


def test_trim_markers_and_comment():
    assert render("a  {{- /* note */ -}}  b", {}) == render("ab", {})


def test_unclosed_action():
    with pytest.raises(TemplateError) as exc:
        Template("bad").parse("foo{{")
    assert str(exc.value) == "template: bad:1: unclosed action"


def test_template_not_defined():
    tmpl = Template("bad").parse('foo{{template "nope"}}')
    with pytest.raises(TemplateError) as exc:
        tmpl.execute({})
    assert str(exc.value) == (
        'template: bad:1:14: executing "bad" at <{{template "nope"}}>: '
        'template "nope" not defined'
    )


def test_unknown_function_is_parse_error():
    with pytest.raises(TemplateError, match='function "upper" not defined'):
        Template("t").parse("{{upper .x}}")


def test_unexpected_end():
    with pytest.raises(TemplateError, match="unexpected"):
        Template("t").parse("{{end}}")
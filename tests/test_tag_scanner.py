import pytest

from mule_diagram.tag_scanner import (
    TagEventKind,
    TagScanner,
    find_tag_end,
    parse_attributes,
    scan_tags,
)


def _summary(events):
    return [(event.kind, event.name) for event in events]


def test_scan_open_close_and_self_closing():
    events = scan_tags('<try><logger level="INFO"/></try>')
    assert _summary(events) == [
        (TagEventKind.OPEN, "try"),
        (TagEventKind.SELF_CLOSE, "logger"),
        (TagEventKind.CLOSE, "try"),
    ]
    assert events[1].attributes == {"level": "INFO"}
    assert events[1].self_closing
    assert events[0].is_opening and not events[0].self_closing


def test_namespaced_attributes_kept_verbatim():
    events = scan_tags('<http:listener doc:name="Listener" config-ref=\'HTTP_Config\' path="/api/*"/>')
    assert events[0].name == "http:listener"
    assert events[0].attributes == {
        "doc:name": "Listener",
        "config-ref": "HTTP_Config",
        "path": "/api/*",
    }


def test_comments_and_cdata_are_opaque():
    body = """
        <!-- <flow-ref name="Commented"/> -->
        <ee:transform>
            <ee:set-payload><![CDATA[%dw 2.0
            output application/json
            ---
            { a: payload.b < 3, tag: "<fake/>" }]]></ee:set-payload>
        </ee:transform>
    """
    names = [event.name for event in scan_tags(body)]
    assert "flow-ref" not in names
    assert "fake" not in names
    assert names == ["ee:transform", "ee:set-payload", "ee:set-payload", "ee:transform"]


def test_processing_instruction_and_doctype_skipped():
    events = scan_tags('<?xml version="1.0"?><!DOCTYPE mule><mule></mule>')
    assert _summary(events) == [(TagEventKind.OPEN, "mule"), (TagEventKind.CLOSE, "mule")]


def test_gt_inside_quoted_attribute_does_not_end_tag():
    events = scan_tags('<when expression="#[vars.count > 10]"><logger/></when>')
    assert events[0].attributes["expression"] == "#[vars.count > 10]"
    assert _summary(events)[1] == (TagEventKind.SELF_CLOSE, "logger")


def test_tag_names_are_lowercased():
    assert scan_tags("<Choice></CHOICE>")[1].name == "choice"


@pytest.mark.parametrize("text", [None, "", "   ", "plain text only"])
def test_empty_or_tagless_input_yields_no_events(text):
    assert scan_tags(text) == []


def test_unterminated_tag_ends_scan():
    events = scan_tags('<logger/><set-payload value="x"')
    assert _summary(events) == [(TagEventKind.SELF_CLOSE, "logger")]


def test_stray_angle_bracket_is_ignored():
    events = scan_tags("<logger/> 3 < > <async></async>")
    assert [event.name for event in events] == ["logger", "async", "async"]


def test_scanners_do_not_share_state():
    first = TagScanner("<a/><b/>")
    second = TagScanner("<c/>")
    assert next(first).name == "a"
    assert next(second).name == "c"
    assert next(first).name == "b"
    with pytest.raises(StopIteration):
        next(second)


def test_parse_attributes_handles_both_quote_styles():
    assert parse_attributes(""" name="a" doc:id='b-1' empty="" """) == {"name": "a", "doc:id": "b-1", "empty": ""}
    assert parse_attributes(None) == {}


def test_find_tag_end_respects_quotes():
    text = '<x a="1>2" b=\'>\'>rest'
    assert text[find_tag_end(text, 1)] == ">"
    assert find_tag_end(text, 1) == text.index(">rest")
    assert find_tag_end('<x a="open', 1) == -1

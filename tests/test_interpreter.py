"""Tests for placeholder substitution and the interpreter."""

import pytest

from message_channel import (
    Code,
    CodedTemplate,
    InterpreterEnvironment,
    Key,
    KeyedTemplate,
    Message,
    MessageInterpreter,
    TemplateError,
    placeholder_keys,
    replace_placeholders,
)


# ── Substitution ─────────────────────────────────────────────────────

def test_replace_single_placeholder():
    assert replace_placeholders("Blah is <@bla@>", {"bla": "really a very big bla"}) == (
        "Blah is really a very big bla"
    )


def test_replace_no_match_sentinel():
    template = "This string needs to replace <@bla@> with Tralala and <@noMatch@>"
    assert replace_placeholders(template, {"bla": "Tralala"}) == (
        "This string needs to replace Tralala with Tralala and NO MATCH"
    )
    assert replace_placeholders("<@x@>", {}, no_match="?") == "?"


def test_replace_independent_placeholders():
    assert replace_placeholders("<@a@> and <@b@>", {"a": "1", "b": "2"}) == "1 and 2"
    assert replace_placeholders("<@a@>-<@a@>", {"a": "1"}) == "1-1"


def test_replaced_values_are_not_rescanned():
    assert replace_placeholders("<@a@>!", {"a": "<@a@>"}) == "<@a@>!"


def test_unbalanced_markers_left_alone():
    assert replace_placeholders("Hello <@name", {"name": "Ada"}) == "Hello <@name"
    assert replace_placeholders("x @> y", {}) == "x @> y"
    assert replace_placeholders("<@a@> then <@b", {"a": "1"}) == "1 then <@b"


def test_custom_markers():
    assert replace_placeholders(
        "Hi {{name}}", {"name": "Ada"}, start_marker="{{", end_marker="}}"
    ) == "Hi Ada"


def test_empty_markers_rejected():
    with pytest.raises(ValueError):
        replace_placeholders("x", {}, start_marker="")


def test_placeholder_keys():
    assert placeholder_keys("<@b@> <@a@> <@b@>") == ["b", "a"]
    assert placeholder_keys("no placeholders") == []


# ── Interpreter ──────────────────────────────────────────────────────

def test_interpreter_defaults():
    sut = MessageInterpreter(InterpreterEnvironment(default_language="de"))
    assert sut.default_language == "de"
    assert sut.environment.language_preferences == ["de"]


def test_undefined_messages():
    sut = MessageInterpreter()
    env = sut.environment
    assert sut.localized_string_value(Message(Code(1)), "en") == f"{env.undefined_code_prefix}1"
    assert sut.localized_string_value(Message(Code(1)), "en") == "Undefined message with code: 1"
    assert sut.string_value(Message(Key("key"))) == "Undefined message with key: key"


def test_attribute_matching():
    sut1 = MessageInterpreter(InterpreterEnvironment(default_language="en"))
    sut2 = MessageInterpreter(InterpreterEnvironment(default_language="de"))

    sut1.set_messages_for_keys({"bla": "Blah is <@bla@>"}, language="en")
    sut2.set_messages_for_codes({42: "no luck is <@42@>", 666: "fatal error"}, language="de")

    msg1 = Message(Key("bla"), arguments={"bla": "really a very big bla"})
    msg2 = Message(Code(42), arguments={"42": "the meaning of life"})

    assert sut1.localized_string_value(msg1, "en") == "Blah is really a very big bla"
    assert sut2.localized_string_value(msg2, "de") == "no luck is the meaning of life"
    assert sut2.string_value(Message(Code(666))) == "fatal error"


def test_template_without_arguments_is_returned_raw():
    sut = MessageInterpreter()
    sut.set_messages_for_keys({"hi": "Hi <@name@>"})
    assert sut.string_value(Message(Key("hi"))) == "Hi <@name@>"


def test_set_messages_replaces_whole_table():
    sut = MessageInterpreter()
    sut.set_messages_for_codes({1: "one", 2: "two"})
    sut.set_messages_for_codes({3: "three"})
    assert sut.string_value(Message(Code(3))) == "three"
    assert sut.string_value(Message(Code(1))) == "Undefined message with code: 1"


def test_language_tables_are_separate():
    sut = MessageInterpreter()
    sut.set_messages_for_keys({"hello": "Hello"}, language="en")
    sut.set_messages_for_keys({"hello": "Hallo"}, language="de")
    msg = Message(Key("hello"))
    assert sut.localized_string_value(msg, "en") == "Hello"
    assert sut.localized_string_value(msg, "de") == "Hallo"
    assert sut.localized_string_value(msg, "fr") == "Undefined message with key: hello"


def test_add_templates_merge_per_key():
    env = InterpreterEnvironment()
    env.add_coded_template(CodedTemplate(1, {"en": "One", "de": "Eins"}))
    env.add_coded_template(CodedTemplate(2, {"en": "Two"}))
    env.add_keyed_template(KeyedTemplate("k", {"en": "Kay"}))
    env.add_coded_template(CodedTemplate(1, {"en": "First"}))

    assert env.code_templates == {"en": {1: "First", 2: "Two"}, "de": {1: "Eins"}}
    assert env.template_for(Key("k"), "en") == "Kay"

    env.clear_code_templates()
    env.clear_key_templates()
    assert env.template_for(Code(2), "en") is None
    assert env.template_for(Key("k"), "en") is None


def test_preferred_language_fallback():
    env = InterpreterEnvironment(language_preferences=["de", "en"])
    env.set_messages_for_codes({1: "Hello", 2: "Bye"}, language="en")
    env.set_messages_for_codes({1: "Hallo"}, language="de")
    sut = MessageInterpreter(env)

    assert sut.preferred_string_value(Message(Code(1))) == "Hallo"
    assert sut.preferred_string_value(Message(Code(2))) == "Bye"
    assert sut.preferred_string_value(Message(Code(3))) == "Undefined message with code: 3"


def test_interpret_sends_to_sink():
    lines = []
    sut = MessageInterpreter(sink=lines.append)
    sut.set_messages_for_keys({"login": "User <@user@> logged in"})

    text = sut.interpret(Message(Key("login"), arguments={"user": "alice"}))

    assert text == "User alice logged in"
    assert lines == ["User alice logged in"]


def test_interpret_default_sink_prints(capsys):
    MessageInterpreter().interpret(Message(Code(5)))
    assert capsys.readouterr().out == "Undefined message with code: 5\n"


def test_message_without_template_lists_arguments():
    env = InterpreterEnvironment(ignore_messages_without_template=False)
    sut = MessageInterpreter(env)
    msg = Message(Code(7), arguments={"b": "2", "a": "1"})
    assert sut.string_value(msg) == (
        "Undefined message with code: 7. Message without templates with arguments: a=1, b=2"
    )


def test_unmatched_arguments_appended():
    env = InterpreterEnvironment(ignore_unmatched_arguments=False)
    env.set_messages_for_keys({"hi": "Hi <@name@>"})
    sut = MessageInterpreter(env)
    msg = Message(Key("hi"), arguments={"name": "Ada", "extra": "x"})
    assert sut.string_value(msg) == "Hi Ada Unmatched arguments: extra=x"
    assert sut.string_value(Message(Key("hi"), arguments={"name": "Ada"})) == "Hi Ada"


def test_load_templates_by_language():
    env = InterpreterEnvironment()
    env.load_templates({
        "codes": {"en": {"1": "One <@x@>", 2: "Two"}},
        "keys": {"de": {"hello": "Hallo"}},
    })
    assert env.code_templates == {"en": {1: "One <@x@>", 2: "Two"}}
    assert env.template_for(Key("hello"), "de") == "Hallo"


def test_load_templates_per_entry():
    env = InterpreterEnvironment()
    env.load_templates({
        "codes": [{"code": 1, "templates": {"en": "One", "de": "Eins"}}],
        "keys": [{"key": "bye", "templates": {"en": "Bye"}}],
    })
    assert env.template_for(Code(1), "de") == "Eins"
    assert env.template_for(Key("bye"), "en") == "Bye"


@pytest.mark.parametrize("data", [
    ["not", "a", "mapping"],
    {"codes": {"en": {"abc": "x"}}},
    {"codes": {"en": {True: "x"}}},
    {"codes": {"en": ["x"]}},
    {"keys": {"en": {"k": 5}}},
    {"keys": [{"templates": {"en": "x"}}]},
    {"keys": [{"key": "k"}]},
    {"keys": "oops"},
])
def test_load_templates_rejects_malformed(data):
    with pytest.raises(TemplateError):
        InterpreterEnvironment().load_templates(data)

import pytest

from modal_engine.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeyStroke,
    KeymapConflictError,
    KeymapRegistry,
    WhenClause,
    load_default_keymaps,
)


def make_action(action_id: str = "core.test") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_sequence(*keys: str) -> KeySequence:
    return KeySequence.from_strings(*keys)


def make_binding(
    *,
    binding_id: str,
    mode: str = "normal",
    sequence: KeySequence | None = None,
    action_id: str = "core.test",
    when: tuple[WhenClause, ...] = (),
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=sequence or make_sequence("g", "g"),
        action_id=action_id,
        when=when,
    )


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    action = make_action()
    registry.register_action(action)
    binding = make_binding(binding_id="normal.gg")

    registry.register_binding(binding)

    assert registry.stats().binding_count == 1
    assert list(registry.iter_bindings(mode="normal")) == [binding]


def test_register_binding_requires_known_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_binding(binding_id="normal.gg"))


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    binding = make_binding(binding_id="normal.gg")
    registry.register_binding(binding)

    with pytest.raises(KeymapConflictError):
        registry.register_binding(make_binding(binding_id="normal.gg.duplicate"))


def test_register_binding_non_overlapping_when() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    binding_recording = make_binding(
        binding_id="recording",
        when=(WhenClause("recording"),),
    )
    binding_idle = make_binding(
        binding_id="idle",
        when=(WhenClause.parse("!recording"),),
    )

    registry.register_binding(binding_recording)
    registry.register_binding(binding_idle)

    assert registry.stats().binding_count == 2


def test_register_binding_with_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    first = make_binding(binding_id="binding")
    second = make_binding(binding_id="binding")

    registry.register_binding(first)
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]


def test_update_binding_changes_sequence() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)
    before = registry.revision()

    updated = registry.update_binding(
        "binding", sequence=make_sequence("d", "d"), description="delete line"
    )

    assert updated.sequence.tokens == ("d", "d")
    assert updated.description == "delete line"
    assert registry.revision() == before + 1


def test_unregister_binding() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)

    removed = registry.unregister_binding("binding")

    assert removed == binding
    assert registry.stats().binding_count == 0


def test_load_default_keymaps_covers_every_mode() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    modes = {binding.mode for binding in registry.iter_bindings()}
    assert modes == {"normal", "operator", "visual", "insert", "command"}
    assert registry.get_binding("normal.insert").action_id == "edit.insert"
    assert registry.get_binding("normal.motion.word_forward").sequence.tokens == ("w",)
    assert registry.get_binding("normal.motion.document_start").sequence.tokens == ("g", "g")
    assert registry.get_binding("operator.textobject.iw").action_id == "textobject.select"


def test_load_default_keymaps_char_argument_metadata() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    assert registry.get_action("motion.find_char").metadata["argument"] == "char"
    assert registry.get_action("edit.replace_char").metadata["argument"] == "char"
    assert "argument" not in registry.get_action("motion.word_forward").metadata


def test_load_default_keymaps_include_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(
        registry,
        include_actions=("edit.insert",),
        include_bindings=("normal.insert",),
    )

    assert registry.stats().binding_count == 1
    assert registry.get_binding("normal.insert").action_id == "edit.insert"


def test_load_default_keymaps_skips_bindings_of_excluded_actions() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, exclude_actions=("edit.join",))

    assert "edit.join" not in {action.id for action in registry.iter_actions()}
    assert "normal.join" not in {binding.id for binding in registry.iter_bindings()}


def test_load_default_keymaps_per_mode_override() -> None:
    registry = KeymapRegistry()
    custom_binding = Binding(
        id="normal.insert",
        mode="normal",
        sequence=KeySequence.from_strings("a"),
        action_id="edit.insert",
    )

    load_default_keymaps(
        registry,
        per_mode_overrides={"normal": (custom_binding,)},
    )

    binding = registry.get_binding("normal.insert")
    assert binding.sequence.tokens == ("a",)
    assert "normal.append" not in {b.id for b in registry.iter_bindings(mode="normal")}


def test_load_default_keymaps_override_must_match_mode() -> None:
    registry = KeymapRegistry()
    custom_binding = Binding(
        id="insert.exit",
        mode="insert",
        sequence=KeySequence.from_strings("ctrl+c"),
        action_id="insert.exit",
    )

    with pytest.raises(ValueError):
        load_default_keymaps(registry, per_mode_overrides={"normal": (custom_binding,)})


def test_prefix_binding_shadows_longer_sequence() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="normal.gg"))

    with pytest.raises(KeymapConflictError) as excinfo:
        registry.register_binding(make_binding(binding_id="normal.g", sequence=make_sequence("g")))

    assert [conflict.id for conflict in excinfo.value.conflicts] == ["normal.gg"]


def test_prefix_binding_allowed_in_exclusive_context() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="normal.gg", when=(WhenClause("custom"),)))

    registry.register_binding(
        make_binding(
            binding_id="normal.g",
            sequence=make_sequence("g"),
            when=(WhenClause.parse("!custom"),),
        )
    )

    assert registry.stats().binding_count == 2


def test_replace_evicts_shadowed_bindings() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="normal.gg"))

    registry.register_binding(
        make_binding(binding_id="normal.g", sequence=make_sequence("g")), replace=True
    )

    assert [binding.id for binding in registry.iter_bindings()] == ["normal.g"]


def test_update_binding_rejects_conflicts() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="normal.gg"))
    registry.register_binding(
        make_binding(binding_id="normal.dd", sequence=make_sequence("d", "d"))
    )

    with pytest.raises(KeymapConflictError):
        registry.update_binding("normal.dd", sequence=make_sequence("g"))

    assert registry.get_binding("normal.dd").sequence.tokens == ("d", "d")


def test_stats_lists_modes() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="normal.gg"))
    registry.register_binding(make_binding(binding_id="visual.gg", mode="visual"))

    stats = registry.stats()

    assert stats.action_count == 1
    assert stats.modes == ("normal", "visual")


def test_key_stroke_parses_modifiers() -> None:
    stroke = KeyStroke.parse("Shift+Ctrl+r")

    assert stroke.key == "r"
    assert stroke.modifiers == ("ctrl", "shift")
    assert stroke.token == "ctrl+shift+r"
    assert KeyStroke.parse("+").token == "+"


def test_when_clause_round_trips_as_text() -> None:
    assert str(WhenClause.parse("!recording")) == "!recording"
    assert WhenClause.parse(" recording ").evaluate({"recording": True}) is True


def test_action_argument_flag() -> None:
    plain = make_action()
    waiting = ActionRef(id="core.mark", handler=plain.handler, metadata={"argument": "char"})

    assert plain.takes_argument is False
    assert waiting.takes_argument is True

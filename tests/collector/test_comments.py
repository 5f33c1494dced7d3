"""Tests for toast.collector.comments."""

from __future__ import annotations

from toast.collector.comments import classify, constraint, pragma
from toast.models import Comment, Constraint, GenerateComment, MagicComment


def test_pragma_recognizes_generate_and_magic_prefixes() -> None:
    assert pragma("//go:generate stringer -type=Pill") == GenerateComment(
        command="stringer -type=Pill", raw="//go:generate stringer -type=Pill"
    )
    assert pragma("//go:noinline") == MagicComment(pragma="noinline", raw="//go:noinline")
    assert pragma("// go:noinline is not a directive") is None


def test_constraint_splits_options_on_whitespace() -> None:
    tags = constraint("// +build linux,386 darwin,!cgo")

    assert tags == Constraint(options=["linux,386", "darwin,!cgo"])
    assert str(tags) == "// +build linux,386 darwin,!cgo"
    assert constraint("// build linux") is None


def test_classify_keeps_categories_disjoint() -> None:
    result = classify(
        [
            "// +build linux",
            "// Counter counts things.",
            "//go:generate stringer -type=Counter",
            "//go:noinline",
            "// It is safe for one goroutine.",
        ]
    )

    assert result.build_tags == [Constraint(options=["linux"])]
    assert [comment.command for comment in result.generate_comments] == ["stringer -type=Counter"]
    assert [comment.pragma for comment in result.magic_comments] == ["noinline"]
    assert result.doc == Comment(
        content="// Counter counts things.// It is safe for one goroutine."
    )


def test_classify_with_only_directives_has_empty_doc() -> None:
    result = classify(["//go:embed static/*"])

    assert result.doc.content == ""
    assert result.magic_comments[0].pragma == "embed static/*"


def test_doc_attaches_to_the_following_declaration(collect) -> None:
    result = collect(
        """
        package counter

        // Unrelated note.

        // Counter counts.
        // It never wraps.
        type Counter struct{}

        func Reset() {} // Reset is a trailing note.
        """
    )

    assert result.structs[0].doc.content == "// Counter counts.// It never wraps."
    assert result.funcs[0].doc.content == ""
    assert result.funcs[0].comment.content == "// Reset is a trailing note."


def test_build_constraint_and_doc_are_recorded_independently(collect) -> None:
    result = collect(
        """
        package counter

        // +build linux
        // Counter counts.
        type Counter struct{}
        """
    )

    assert result.build_tags == [Constraint(options=["linux"])]
    assert result.structs[0].doc == Comment(content="// Counter counts.")
    assert Comment(content="// Counter counts.") in result.comments


def test_generate_directive_attaches_to_declaration_and_file(collect) -> None:
    result = collect(
        """
        package pill

        //go:generate stringer -type=Pill
        type Pill int
        """
    )

    type_def = result.type_defs[0]
    assert type_def.generate_comments[0].argv() == ["stringer", "-type=Pill"]
    assert type_def.doc.content == ""
    assert result.generate_comments == type_def.generate_comments


def test_trailing_comment_of_earlier_code_is_not_doc(collect) -> None:
    result = collect(
        """
        package cfg

        type Config struct {
            Host string // Host name.
            Port int
        }
        """
    )

    host, port = result.structs[0].fields
    assert host.comment.content == "// Host name."
    assert port.doc.content == ""

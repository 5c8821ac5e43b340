"""Test quasi-quote and CPP marker rewriting in Haskell source"""

import pytest

from hamlet6to7.migrator.embedded import MARKER_PATTERNS, EmbeddedSourceRewriter
from hamlet6to7.migrator.errors import MalformedMarkerError
from hamlet6to7.migrator.models import MarkerKind

MIXED_SOURCE = """{-# LANGUAGE CPP #-}
#if GHC7
#define JULIUS julius
#else
#define JULIUS $julius
#endif
module Handler.Root where

script = [JULIUS|var n = %count%;|]
style = [$cassius|a
    color: $linkColor$
|]
page =
#if __GLASGOW_HASKELL__ >= 700
  [hamlet|
#else
  [$hamlet|
#endif
%a!href=@HomeR@ Home
|]
already = [hamlet|<p>#{done}|]
"""

MIXED_MIGRATED = """{-# LANGUAGE CPP #-}
module Handler.Root where

script = [julius|var n = #{count};|]
style = [cassius|a
    color: #{linkColor}
|]
page =
  [hamlet|
<a href=@{HomeR}>Home
|]
already = [hamlet|<p>#{done}|]
"""


class TestEmbeddedSourceRewriter:
    """Test the four embedded marker rules"""

    def setup_method(self) -> None:
        self.rewriter = EmbeddedSourceRewriter()

    def test_source_without_markers_is_identical(self) -> None:
        source = 'module Main where\r\n\r\nmain :: IO ()\r\nmain = putStrLn "a | b |]"\r\n'
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == source
        assert not counts

    def test_legacy_opener_rewritten_in_place(self) -> None:
        prefix = "getRootR = defaultLayout $ addHamlet "
        source = prefix + "[$hamlet|%h1 Hello|]\n-- end\n"

        rewritten, counts = self.rewriter.rewrite(source)

        assert rewritten == prefix + "[hamlet|<h1>Hello|]\n-- end\n"
        assert rewritten.count("[hamlet|") == 1
        assert rewritten.index("[hamlet|") == source.index("[$hamlet|")
        assert counts == {MarkerKind.LEGACY_OPENER: 1}

    def test_macro_opener_rewritten(self) -> None:
        source = "homeStyle = [CASSIUS|\nbody\n    color: $textColor$\n|]\n"
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == "homeStyle = [cassius|\nbody\n    color: #{textColor}\n|]\n"
        assert counts == {MarkerKind.MACRO_OPENER: 1}

    def test_conditional_guard_keeps_ghc7_branch(self) -> None:
        source = (
            "getHomeR = defaultLayout $ addHamlet\n"
            "#if GHC7\n"
            "    [hamlet|\n"
            "#else\n"
            "    [$hamlet|\n"
            "#endif\n"
            "%p $greeting$\n"
            "|]\n"
        )
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == (
            "getHomeR = defaultLayout $ addHamlet\n"
            "    [hamlet|\n"
            "<p>#{greeting}\n"
            "|]\n"
        )
        assert counts == {MarkerKind.CONDITIONAL_GUARD: 1}

    @pytest.mark.parametrize(
        "guard",
        [
            "#if GHC7",
            "#ifdef GHC7",
            "#if defined(GHC7)",
            "# if __GLASGOW_HASKELL__ >= 700",
        ],
    )
    def test_conditional_guard_forms(self, guard: str) -> None:
        source = f"{guard}\nx = [hamlet|\n#else\nx = [$hamlet|\n#endif\n%p $y$\n|]\n"
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == "x = [hamlet|\n<p>#{y}\n|]\n"
        assert counts == {MarkerKind.CONDITIONAL_GUARD: 1}

    def test_guard_with_complete_blocks_in_both_branches(self) -> None:
        source = (
            "#if GHC7\n"
            "foo = [hamlet|%p $hi$|]\n"
            "#else\n"
            "foo = [$hamlet|%p $hi$|]\n"
            "#endif\n"
        )
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == "foo = [hamlet|<p>#{hi}|]\n"
        assert counts == {MarkerKind.CONDITIONAL_GUARD: 1}

    @pytest.mark.parametrize(
        ("source", "expected", "kind"),
        [
            (
                "w = [$xhamlet|%br $x$|]\n",
                "w = [xhamlet|<br>#{x}|]\n",
                MarkerKind.LEGACY_OPENER,
            ),
            (
                "w = [XHAMLET|%br $x$|]\n",
                "w = [xhamlet|<br>#{x}|]\n",
                MarkerKind.MACRO_OPENER,
            ),
            (
                "s = [$julius|var a = %x%;|]\n",
                "s = [julius|var a = #{x};|]\n",
                MarkerKind.LEGACY_OPENER,
            ),
            (
                "s = [HAMLET|%p @?HomeR@|]\n",
                "s = [hamlet|<p>@?{HomeR}|]\n",
                MarkerKind.MACRO_OPENER,
            ),
        ],
    )
    def test_opener_variants(
        self, source: str, expected: str, kind: MarkerKind
    ) -> None:
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == expected
        assert counts == {kind: 1}

    @pytest.mark.parametrize(
        "guard", ["#ifndef GHC7", "#if __GLASGOW_HASKELL__ < 700"]
    )
    def test_legacy_block_across_unrecognized_guard_fails(self, guard: str) -> None:
        source = (
            "page = \n"
            f"{guard}\n"
            "  [$hamlet|\n"
            "#else\n"
            "  [hamlet|\n"
            "#endif\n"
            "%p $x$\n"
            "|]\n"
        )
        with pytest.raises(MalformedMarkerError) as exc_info:
            self.rewriter.rewrite(source)
        assert exc_info.value.line == 3

    def test_legacy_block_across_elif_fails(self) -> None:
        source = (
            "#ifdef GHC6\n"
            "a = [$hamlet|\n"
            "#elif GHC7\n"
            "a = [hamlet|\n"
            "#endif\n"
            "%p hi\n"
            "|]\n"
        )
        with pytest.raises(MalformedMarkerError) as exc_info:
            self.rewriter.rewrite(source)
        assert exc_info.value.line == 2

    def test_macro_conditional_removed(self) -> None:
        source = (
            "{-# LANGUAGE CPP, QuasiQuotes #-}\n"
            "#if GHC7\n"
            "#define HAMLET hamlet\n"
            "#else\n"
            "#define HAMLET $hamlet\n"
            "#endif\n"
            "module Handler.Root where\n"
        )
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == (
            "{-# LANGUAGE CPP, QuasiQuotes #-}\nmodule Handler.Root where\n"
        )
        assert counts == {MarkerKind.MACRO_CONDITIONAL: 1}

    def test_mixed_markers_rewritten_independently(self) -> None:
        rewritten, counts = self.rewriter.rewrite(MIXED_SOURCE)
        assert rewritten == MIXED_MIGRATED
        assert counts == {
            MarkerKind.MACRO_CONDITIONAL: 1,
            MarkerKind.MACRO_OPENER: 1,
            MarkerKind.LEGACY_OPENER: 1,
            MarkerKind.CONDITIONAL_GUARD: 1,
        }

    def test_rewrite_is_idempotent(self) -> None:
        once, _ = self.rewriter.rewrite(MIXED_SOURCE)
        twice, counts = self.rewriter.rewrite(once)
        assert twice == once
        assert not counts

    def test_unterminated_legacy_block_reports_original_line(self) -> None:
        source = (
            "#if GHC7\n"
            "#define HAMLET hamlet\n"
            "#else\n"
            "#define HAMLET $hamlet\n"
            "#endif\n"
            "x = 1\n"
            "y = [HAMLET|%p broken\n"
        )
        with pytest.raises(MalformedMarkerError) as exc_info:
            self.rewriter.rewrite(source)
        assert exc_info.value.line == 7

    def test_unterminated_modern_block_passes_through(self) -> None:
        source = "x = [hamlet|oops\n"
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == source
        assert not counts

    def test_nested_guard_not_recognized(self) -> None:
        source = "#if GHC7\n#ifdef DEV\na = 1\n#endif\n#else\nb = 2\n#endif\n"
        rewritten, counts = self.rewriter.rewrite(source)
        assert rewritten == source
        assert not counts

    def test_guard_without_else_not_recognized(self) -> None:
        source = "#if GHC7\nx = 1\n#endif\n"
        rewritten, _ = self.rewriter.rewrite(source)
        assert rewritten == source

    def test_other_cpp_flags_untouched(self) -> None:
        source = "#if DEVELOPMENT\na = 1\n#else\na = 2\n#endif\n"
        rewritten, _ = self.rewriter.rewrite(source)
        assert rewritten == source


def test_marker_patterns_cover_every_embedded_rule() -> None:
    kinds = {pattern.kind for pattern in MARKER_PATTERNS}
    assert kinds == {
        MarkerKind.LEGACY_OPENER,
        MarkerKind.MACRO_OPENER,
        MarkerKind.CONDITIONAL_GUARD,
        MarkerKind.MACRO_CONDITIONAL,
    }

"""Terminal JSON viewer application."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.widgets import Header, Static

from .config import ConfigError, ViewerConfig
from .viewer import CollapsibleJsonViewer


class JsonViewerApp(App):
    """TUI app that wraps the CollapsibleJsonViewer widget."""

    CSS = """
    Screen {
        layout: vertical;
    }
    #viewer {
        height: 1fr;
        border: solid $accent;
    }
    #help-bar {
        height: auto;
        max-height: 3;
        padding: 0 1;
        color: $text-muted;
        background: $surface;
        border-top: solid $accent 50%;
    }
    """

    TITLE = "JSON Viewer"
    BINDINGS = []
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        data: object = None,
        source: str = "",
        config: ViewerConfig | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.data = data
        self.source = source
        self.config = config or ViewerConfig()

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield CollapsibleJsonViewer(self.data, config=self.config, id="viewer")
        yield Static(
            "[b]Move:[/b] j k  gg G  PgUp/PgDn  [b]Fold:[/b] Enter za zo zc zR zM"
            "  [b]Search:[/b] / ? n N  [b]View:[/b] L T  [b]Quit:[/b] q",
            id="help-bar",
        )

    def on_mount(self) -> None:
        self.sub_title = self.source or "[stdin]"
        self.query_one("#viewer").focus()

    def on_collapsible_json_viewer_quit(self, event: CollapsibleJsonViewer.Quit) -> None:
        self.exit()


def _read_source(file_path: str) -> str:
    if file_path and file_path != "-":
        return Path(file_path).read_text(encoding="utf-8")
    if sys.stdin.isatty():
        return ""
    return sys.stdin.read()


def _build_config(args: argparse.Namespace) -> ViewerConfig:
    return ViewerConfig.from_mapping(
        {
            "display": {
                "indent": args.indent,
                "use_tabs": args.tabs,
                "style": "tree" if args.tree else "json",
                "show_line_numbers": args.line_numbers,
                "use_unicode_tree": not args.ascii,
            },
            "behavior": {
                "expand_depth": args.depth,
                "search_scope": args.scope,
            },
        }
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="jfold",
        description="Collapsible JSON viewer in Textual",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default="",
        help="JSON file to view ('-' or omitted reads stdin)",
    )
    parser.add_argument("--indent", type=int, default=2, help="indent width")
    parser.add_argument(
        "--tabs", action="store_true", default=False, help="indent with tabs"
    )
    parser.add_argument(
        "-d", "--depth",
        type=int,
        default=None,
        help="expand only this many levels on load (default: everything)",
    )
    parser.add_argument(
        "--tree", action="store_true", default=False, help="start in tree view"
    )
    parser.add_argument(
        "--ascii", action="store_true", default=False, help="ASCII tree glyphs"
    )
    parser.add_argument(
        "-n", "--line-numbers",
        action="store_true",
        default=False,
        help="show line numbers",
    )
    parser.add_argument(
        "--scope",
        choices=("all", "keys", "values"),
        default="all",
        help="default search scope",
    )
    args = parser.parse_args()

    try:
        config = _build_config(args)
        text = _read_source(args.file)
        data = json.loads(text) if text.strip() else None
    except (OSError, ConfigError) as exc:
        print(f"jfold: {exc}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as exc:
        print(f"jfold: invalid JSON: {exc.msg} (line {exc.lineno})", file=sys.stderr)
        sys.exit(1)

    app = JsonViewerApp(data=data, source=args.file, config=config)
    app.run()


if __name__ == "__main__":
    main()

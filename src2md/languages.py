from __future__ import annotations

from pathlib import PurePosixPath

# Matched case-insensitively against the file name before the extension table.
FILENAME_LANGUAGES: dict[str, str] = {
    "dockerfile": "dockerfile",
    "makefile": "makefile",
    "gnumakefile": "makefile",
    "cmakelists.txt": "cmake",
    "rakefile": "ruby",
    "gemfile": "ruby",
    "vagrantfile": "ruby",
    "justfile": "just",
    ".gitignore": "gitignore",
    ".gitattributes": "gitignore",
    ".gitmodules": "gitignore",
    ".env": "dotenv",
    ".env.local": "dotenv",
    ".env.example": "dotenv",
    ".editorconfig": "editorconfig",
    "procfile": "procfile",
}

EXTENSION_LANGUAGES: dict[str, str] = {
    "rs": "rust",
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "jsx": "jsx",
    "ts": "typescript",
    "mts": "typescript",
    "cts": "typescript",
    "tsx": "tsx",
    "html": "html",
    "htm": "html",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "less": "less",
    "vue": "vue",
    "svelte": "svelte",
    "astro": "astro",
    "py": "python",
    "pyi": "python",
    "pyw": "python",
    "pyx": "cython",
    "pxd": "cython",
    "rb": "ruby",
    "erb": "erb",
    "rake": "ruby",
    "gemspec": "ruby",
    "go": "go",
    "mod": "gomod",
    "sum": "gosum",
    "java": "java",
    "kt": "kotlin",
    "kts": "kotlin",
    "scala": "scala",
    "sc": "scala",
    "groovy": "groovy",
    "gradle": "gradle",
    "clj": "clojure",
    "cljs": "clojure",
    "cljc": "clojure",
    "edn": "clojure",
    "c": "c",
    "h": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
    "hh": "cpp",
    "hxx": "cpp",
    "cs": "csharp",
    "fs": "fsharp",
    "fsi": "fsharp",
    "fsx": "fsharp",
    "vb": "vb",
    "csproj": "xml",
    "fsproj": "xml",
    "sln": "xml",
    "zig": "zig",
    "nim": "nim",
    "d": "d",
    "hs": "haskell",
    "ml": "ocaml",
    "mli": "ocaml",
    "ex": "elixir",
    "exs": "elixir",
    "erl": "erlang",
    "hrl": "erlang",
    "elm": "elm",
    "rkt": "racket",
    "scm": "scheme",
    "lisp": "lisp",
    "sh": "bash",
    "bash": "bash",
    "zsh": "zsh",
    "fish": "fish",
    "ps1": "powershell",
    "psm1": "powershell",
    "bat": "batch",
    "cmd": "batch",
    "json": "json",
    "jsonc": "jsonc",
    "json5": "json5",
    "yaml": "yaml",
    "yml": "yaml",
    "toml": "toml",
    "xml": "xml",
    "xsd": "xml",
    "xsl": "xml",
    "ini": "ini",
    "cfg": "ini",
    "conf": "conf",
    "properties": "properties",
    "md": "markdown",
    "markdown": "markdown",
    "mdx": "mdx",
    "rst": "rst",
    "tex": "latex",
    "adoc": "asciidoc",
    "org": "org",
    "txt": "text",
    "sql": "sql",
    "prisma": "prisma",
    "tf": "hcl",
    "tfvars": "hcl",
    "hcl": "hcl",
    "nix": "nix",
    "php": "php",
    "swift": "swift",
    "m": "objectivec",
    "mm": "objectivec",
    "pl": "perl",
    "pm": "perl",
    "lua": "lua",
    "r": "r",
    "jl": "julia",
    "asm": "asm",
    "s": "asm",
    "proto": "protobuf",
    "graphql": "graphql",
    "gql": "graphql",
    "j2": "jinja",
    "jinja": "jinja",
    "hbs": "handlebars",
    "diff": "diff",
    "patch": "diff",
    "log": "log",
    "csv": "csv",
    "tsv": "tsv",
    "svg": "svg",
    "glsl": "glsl",
    "cu": "cuda",
    "sol": "solidity",
}


def language_for(rel_path: str) -> str:
    """Fence info string for ``rel_path``; empty when unknown."""
    p = PurePosixPath(rel_path)
    name = p.name.lower()
    if name in FILENAME_LANGUAGES:
        return FILENAME_LANGUAGES[name]
    ext = p.suffix.lower().lstrip(".")
    return EXTENSION_LANGUAGES.get(ext, "")

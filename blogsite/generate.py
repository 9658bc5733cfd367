#!/usr/bin/env python3
"""Generate the blog's HTML pages from markdown posts."""

from __future__ import annotations

import argparse
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from blogsite.posts import Post, parse_post

POSTS_DIR = Path("posts")
OUTPUT_DIR = Path("output")
TEMPLATES_DIR = Path("templates")

IMAGES_DIRNAME = "images"
POST_TEMPLATE = "post.html"
INDEX_TEMPLATE = "index.html"
INDEX_PAGE = "index.html"
STYLESHEET_TEMPLATE = "base.css"
REQUIRED_TEMPLATES = (POST_TEMPLATE, INDEX_TEMPLATE, STYLESHEET_TEMPLATE)


@dataclass
class BuildConfig:
    posts_dir: Path = POSTS_DIR
    output_dir: Path = OUTPUT_DIR
    templates_dir: Path = TEMPLATES_DIR


def load_posts(posts_dir: Path) -> List[Post]:
    """Parse every markdown file in ``posts_dir``, newest first."""
    if not posts_dir.is_dir():
        return []

    posts: List[Post] = []
    for path in sorted(posts_dir.glob("*.md")):
        if not path.is_file():
            continue
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Skipping {path}: {exc}", file=sys.stderr)
            continue
        post = parse_post(path, raw)
        if post is not None:
            posts.append(post)

    posts.sort(key=lambda post: post.date, reverse=True)
    return posts


def copy_images(posts_dir: Path, output_dir: Path) -> List[Path]:
    images_src = posts_dir / IMAGES_DIRNAME
    if not images_src.is_dir():
        return []

    images_dest = output_dir / IMAGES_DIRNAME
    images_dest.mkdir(parents=True, exist_ok=True)
    copied: List[Path] = []
    for path in sorted(images_src.iterdir()):
        if not path.is_file():
            continue
        dest_path = images_dest / path.name
        shutil.copyfile(path, dest_path)
        copied.append(dest_path)
    return copied


def load_templates(templates_dir: Path) -> Environment:
    missing = [name for name in REQUIRED_TEMPLATES if not (templates_dir / name).is_file()]
    if missing:
        raise FileNotFoundError(f"Missing templates in {templates_dir}: {', '.join(missing)}")
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html"]),
    )


def render_post_page(env: Environment, post: Post) -> str:
    try:
        template = env.get_template(POST_TEMPLATE)
        return template.render(
            title=post.title,
            date=post.date,
            excerpt=post.excerpt,
            slug=post.slug,
            content=post.html_content,
        )
    except TemplateError as exc:
        print(f"Error rendering post template for {post.slug}: {exc}", file=sys.stderr)
        return ""


def render_index_page(env: Environment, posts: Sequence[Post]) -> str:
    try:
        template = env.get_template(INDEX_TEMPLATE)
        return template.render(posts=[post.summary() for post in posts])
    except TemplateError as exc:
        print(f"Error rendering index template: {exc}", file=sys.stderr)
        return ""


def build_blog(config: BuildConfig) -> List[Path]:
    """Build the whole site and return the written paths, images included."""
    config.output_dir.mkdir(parents=True, exist_ok=True)

    posts = load_posts(config.posts_dir)
    written = copy_images(config.posts_dir, config.output_dir)

    env = load_templates(config.templates_dir)
    for post in posts:
        output_path = config.output_dir / f"{post.slug}.html"
        if output_path.name == INDEX_PAGE:
            print(f"Warning: post {post.slug!r} is overwritten by the index page", file=sys.stderr)
        output_path.write_text(render_post_page(env, post), encoding="utf-8")
        written.append(output_path)

    index_path = config.output_dir / INDEX_PAGE
    index_path.write_text(render_index_page(env, posts), encoding="utf-8")
    written.append(index_path)
    return written


def add_path_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--posts-dir", default=str(POSTS_DIR), help="Directory containing markdown posts")
    parser.add_argument("--output-dir", default=str(OUTPUT_DIR), help="Directory for generated HTML pages")
    parser.add_argument("--templates-dir", default=str(TEMPLATES_DIR), help="Directory containing post.html, index.html and base.css")


def config_from_args(args: argparse.Namespace) -> BuildConfig:
    return BuildConfig(
        posts_dir=Path(args.posts_dir),
        output_dir=Path(args.output_dir),
        templates_dir=Path(args.templates_dir),
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    add_path_arguments(parser)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        written = build_blog(config_from_args(args))
    except OSError as exc:
        print(f"Failed to build blog: {exc}", file=sys.stderr)
        return 1

    for path in written:
        print(f"Generated {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Text rewrites from source template dialects into Liquid.

These are best-effort, line-level conversions. Anything that cannot be
expressed is left in place and flagged by the calling stage.
"""

import re
import tomllib
from datetime import date, datetime
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Optional, Tuple

import frontmatter
import yaml

from ..utils.exceptions import FrontMatterError

TextTransform = Callable[[str, str], str]

_TOML_FRONT_MATTER = re.compile(r'\A\+\+\+[ \t]*\r?\n(.*?)\r?\n\+\+\+[ \t]*(?:\r?\n|\Z)', re.S)
_YAML_FRONT_MATTER = re.compile(r'\A---[ \t]*\r?\n')
_DATED_NAME = re.compile(r'^(\d{4})-(\d{2})-(\d{2})-(.+)$')


def chain(*transforms: Callable[[str], str]) -> TextTransform:
    """Compose text-only rewrites into a stage transform."""

    def _apply(text: str, relative: str) -> str:
        for transform in transforms:
            text = transform(text)
        return text

    return _apply


# Front matter


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str, bool]:
    """Split a document into front matter metadata and body.

    YAML (``---``) front matter is parsed with python-frontmatter; TOML
    (``+++``) front matter, as used by Hugo and Zola, with tomllib.

    Returns:
        Tuple of (metadata, body, had_front_matter)

    Raises:
        FrontMatterError: If the front matter block is malformed
    """
    toml_match = _TOML_FRONT_MATTER.match(text)
    if toml_match:
        try:
            metadata = tomllib.loads(toml_match.group(1))
        except tomllib.TOMLDecodeError as e:
            raise FrontMatterError(f'Invalid TOML front matter: {e}') from e
        return metadata, text[toml_match.end():].lstrip('\r\n'), True

    if not _YAML_FRONT_MATTER.match(text):
        return {}, text, False

    try:
        post = frontmatter.loads(text)
    except (yaml.YAMLError, ValueError) as e:
        raise FrontMatterError(f'Invalid YAML front matter: {e}') from e

    if not isinstance(post.metadata, dict):
        raise FrontMatterError('Front matter is not a mapping')
    return dict(post.metadata), post.content, True


def render_front_matter(metadata: Dict[str, Any], body: str) -> str:
    """Render metadata and body back into a YAML front matter document."""
    if not metadata:
        return body
    post = frontmatter.Post(body)
    post.metadata.update(metadata)
    rendered = frontmatter.dumps(post, sort_keys=False)
    if not rendered.endswith('\n'):
        rendered += '\n'
    return rendered


def ensure_front_matter(text: str, defaults: Dict[str, Any]) -> str:
    """Add any missing front matter keys, keeping existing values.

    Raises:
        FrontMatterError: If existing front matter is malformed
    """
    metadata, body, _ = split_front_matter(text)
    for key, value in defaults.items():
        if value is not None:
            metadata.setdefault(key, value)
    return render_front_matter(metadata, body)


def with_layout(text: str, layout: Optional[str]) -> str:
    """Prefix a template with ``layout:`` front matter if a parent was found."""
    if not layout:
        return text
    return f'---\nlayout: {layout}\n---\n{text}'


# Naming helpers


def title_from_stem(stem: str) -> str:
    """Turn a file stem like ``getting-started`` into ``Getting Started``."""
    words = re.split(r'[-_\s]+', stem.strip())
    return ' '.join(w[:1].upper() + w[1:] for w in words if w)


def slugify(value: str) -> str:
    value = re.sub(r'[^\w\s-]', '', value.lower()).strip()
    return re.sub(r'[-\s_]+', '-', value)


def coerce_date(value: Any) -> Optional[date]:
    """Interpret a front matter ``date`` value."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        match = re.match(r'\s*(\d{4})-(\d{2})-(\d{2})', value)
        if match:
            try:
                return date(*(int(g) for g in match.groups()))
            except ValueError:
                return None
    return None


def split_dated_stem(stem: str) -> Tuple[Optional[date], str]:
    """Split ``2020-01-31-hello`` into (date, 'hello')."""
    match = _DATED_NAME.match(stem)
    if match:
        try:
            return date(*(int(g) for g in match.groups()[:3])), match.group(4)
        except ValueError:
            pass
    return None, stem


def post_file_name(post_date: date, slug: str, suffix: str) -> str:
    return f'{post_date.isoformat()}-{slug}{suffix}'


def strip_template_suffix(name: str, mapping: Dict[str, str]) -> str:
    """Rewrite template extensions, longest suffix first.

    ``mapping`` maps suffixes such as ``.html.erb`` to their replacement.
    """
    for suffix in sorted(mapping, key=len, reverse=True):
        if name.endswith(suffix):
            return name[: -len(suffix)] + mapping[suffix]
    return name


# ERB (Middleman, Slate, Bridgetown)

_ERB_COMMENT = re.compile(r'<%#(.*?)%>', re.S)
_ERB_YIELD = re.compile(
    r'<%=\s*(?:yield|yield_content\s*\(?\s*:content\s*\)?|content)\s*%>'
)
_ERB_PARTIAL = re.compile(
    r'<%=\s*(?:partial|render)\b\s*\(?\s*[:"\']?([\w./-]+?)["\']?\s*(?:,[^%]*)?\)?\s*%>'
)
_ERB_OUTPUT = re.compile(r'<%=\s*(.*?)\s*%>', re.S)
_ERB_TAG = re.compile(r'<%\s*(.*?)\s*%>', re.S)


def _erb_expression(expr: str) -> str:
    expr = re.sub(r'current_page\.data\.', 'page.', expr)
    expr = re.sub(r'\bcurrent_page\.', 'page.', expr)
    expr = re.sub(r'\bdata\.', 'site.data.', expr)
    expr = re.sub(r'\bconfig\[:(\w+)\]', r'site.\1', expr)
    return expr


def _include_name(name: str) -> str:
    name = name.strip().strip('"\'')
    parts = PurePosixPath(name)
    base = parts.name.lstrip('_')
    base = strip_template_suffix(
        base,
        {
            '.html.erb': '.html',
            '.erb': '.html',
            '.haml': '.html',
            '.slim': '.html',
            '.njk': '.html',
            '.hbs': '.html',
            '.handlebars': '.html',
            '.blade.php': '.html',
            '.liquid': '.html',
        },
    )
    if '.' not in base:
        base += '.html'
    parent = parts.parent.as_posix()
    if parent in ('', '.', 'partials', 'shared', '_partials', '_includes'):
        return base
    return f'{parent.lstrip("_")}/{base}'


def erb_to_liquid(text: str) -> str:
    """Convert ERB tags to their closest Liquid form."""
    text = text.replace('-%>', '%>').replace('<%-', '<%')
    text = _ERB_COMMENT.sub(
        lambda m: '{% comment %}' + m.group(1).strip() + '{% endcomment %}', text
    )
    text = _ERB_YIELD.sub('{{ content }}', text)
    text = _ERB_PARTIAL.sub(
        lambda m: '{% include ' + _include_name(m.group(1)) + ' %}', text
    )
    text = _ERB_OUTPUT.sub(
        lambda m: '{{ ' + _erb_expression(m.group(1)) + ' }}', text
    )
    closers = []
    text = _ERB_TAG.sub(lambda m: _erb_statement(m.group(1), closers), text)
    return text


def _erb_statement(statement: str, closers: list) -> str:
    statement = _erb_expression(statement.strip())
    if statement == 'end':
        return '{% ' + (closers.pop() if closers else 'endif') + ' %}'
    if statement == 'else':
        return '{% else %}'
    if statement.startswith('elsif '):
        return '{% ' + statement + ' %}'
    each = re.match(r'([\w.]+)\.each\s+do\s*\|\s*(\w+)\s*\|', statement)
    if each:
        closers.append('endfor')
        return '{% for ' + each.group(2) + ' in ' + each.group(1) + ' %}'
    if statement.startswith('unless '):
        closers.append('endunless')
    elif statement.startswith('if '):
        closers.append('endif')
    return '{% ' + statement + ' %}'


# Tera / Jinja2 / Nunjucks (Zola, Nikola, Pelican, Eleventy)

_JINJA_EXTENDS = re.compile(r'\{%-?\s*extends\s+["\']([^"\']+)["\']\s*-?%\}\s*\n?')
_JINJA_CONTENT_BLOCK = re.compile(
    r'\{%-?\s*block\s+content\s*-?%\}(.*?)\{%-?\s*endblock(?:\s+content)?\s*-?%\}',
    re.S,
)
_JINJA_BLOCK_TAG = re.compile(r'\{%-?\s*(?:block\s+\w+|endblock(?:\s+\w+)?)\s*-?%\}')
_JINJA_INCLUDE = re.compile(r'\{%-?\s*include\s+["\']([^"\']+)["\']\s*-?%\}')
_JINJA_GET_URL = re.compile(
    r'\{\{\s*get_url\(\s*path\s*=\s*["\']([^"\']+)["\'][^)]*\)\s*\}\}'
)
_JINJA_SAFE = re.compile(r'\s*\|\s*safe\b')


def _layout_name(template: str) -> str:
    name = PurePosixPath(template).name
    for suffix in ('.html', '.njk', '.tmpl', '.jinja', '.jinja2', '.liquid'):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def jinja_to_liquid(text: str) -> str:
    """Convert Jinja-family templates (Tera, Jinja2, Nunjucks) to Liquid."""
    layout = None
    extends = _JINJA_EXTENDS.search(text)
    if extends:
        layout = _layout_name(extends.group(1))
        text = _JINJA_EXTENDS.sub('', text, count=1)

    if layout:
        text = _JINJA_CONTENT_BLOCK.sub(lambda m: m.group(1).strip('\n'), text)
    else:
        text = _JINJA_CONTENT_BLOCK.sub('{{ content }}', text)
    text = _JINJA_BLOCK_TAG.sub('', text)

    text = _JINJA_GET_URL.sub(
        lambda m: "{{ '/" + m.group(1).lstrip('/') + "' | relative_url }}", text
    )
    text = re.sub(
        r'\{\{\s*(?:page|section|article)\.content\s*(?:\|\s*safe\s*)?\}\}',
        '{{ content }}',
        text,
    )
    text = _JINJA_SAFE.sub('', text)
    text = re.sub(r'\{%(-?)\s*elif\b', r'{%\1 elsif', text)
    text = re.sub(r'\{%(-?)\s*set\s+(\w+)\s*=', r'{%\1 assign \2 =', text)
    text = re.sub(r'\bconfig\.base_url\b', 'site.url', text)
    text = re.sub(r'\bconfig\.(title|description)\b', r'site.\1', text)
    text = re.sub(r'\bconfig\.extra\.', 'site.', text)
    text = re.sub(r'\bSITENAME\b', 'site.title', text)
    text = re.sub(r'\bSITEURL\b', 'site.url', text)
    text = re.sub(r'\b(?:article|entry)\.', 'page.', text)
    text = _JINJA_INCLUDE.sub(
        lambda m: '{% include ' + _include_name(m.group(1)) + ' %}', text
    )
    text = text.replace('{%-', '{%').replace('-%}', '%}')
    text = text.replace('{{-', '{{').replace('-}}', '}}')
    return with_layout(text, layout)


# Handlebars (Metalsmith)


def handlebars_to_liquid(text: str) -> str:
    """Convert Handlebars templates to Liquid."""
    text = re.sub(r'\{\{\{\s*contents?\s*\}\}\}', '{{ content }}', text)
    text = re.sub(r'\{\{\{\s*(.*?)\s*\}\}\}', r'{{ \1 }}', text)
    text = re.sub(
        r'\{\{>\s*["\']?([\w./-]+)["\']?[^}]*\}\}',
        lambda m: '{% include ' + _include_name(m.group(1)) + ' %}',
        text,
    )
    text = re.sub(r'\{\{#each\s+([\w.]+)\s*\}\}', r'{% for item in \1 %}', text)
    text = re.sub(r'\{\{/each\s*\}\}', '{% endfor %}', text)
    text = re.sub(r'\{\{#if\s+([\w.]+)\s*\}\}', r'{% if \1 %}', text)
    text = re.sub(r'\{\{#unless\s+([\w.]+)\s*\}\}', r'{% unless \1 %}', text)
    text = re.sub(r'\{\{else\}\}', '{% else %}', text)
    text = re.sub(r'\{\{/if\s*\}\}', '{% endif %}', text)
    text = re.sub(r'\{\{/unless\s*\}\}', '{% endunless %}', text)
    text = re.sub(r'\bthis\.', 'item.', text)
    text = re.sub(r'\{\{!--(.*?)--\}\}', r'{% comment %}\1{% endcomment %}', text, flags=re.S)
    return text


# Blade (Jigsaw)

_BLADE_EXTENDS = re.compile(r"@extends\(\s*['\"]([^'\"]+)['\"]\s*\)\s*\n?")


def _blade_expression(expr: str) -> str:
    expr = expr.strip()
    expr = re.sub(r'\$page->getContent\(\)', 'content', expr)
    expr = re.sub(r'\$page->baseUrl\b', 'site.baseurl', expr)
    expr = re.sub(r'\$(\w+)->(\w+)\(\)', r'\1.\2', expr)
    expr = re.sub(r'\$(\w+)->', r'\1.', expr)
    expr = re.sub(r'->', '.', expr)
    expr = re.sub(r'\$(\w+)', r'\1', expr)
    return expr


def blade_to_liquid(text: str) -> str:
    """Convert Blade templates to Liquid."""
    layout = None
    extends = _BLADE_EXTENDS.search(text)
    if extends:
        layout = PurePosixPath(extends.group(1).replace('.', '/')).name
        text = _BLADE_EXTENDS.sub('', text, count=1)

    text = re.sub(r"@yield\(\s*['\"]content['\"]\s*\)", '{{ content }}', text)
    text = re.sub(r"@section\(\s*['\"]content['\"]\s*\)\s*\n?", '', text)
    text = re.sub(r'@(?:endsection|stop|show)\b\s*\n?', '', text)
    text = re.sub(
        r"@include\(\s*['\"]([^'\"]+)['\"][^)]*\)",
        lambda m: '{% include '
        + _include_name(m.group(1).replace('.', '/'))
        + ' %}',
        text,
    )
    text = re.sub(
        r'@foreach\s*\(\s*\$?([\w>.-]+)\s+as\s+\$(\w+)\s*\)',
        lambda m: '{% for ' + m.group(2) + ' in ' + _blade_expression(m.group(1)) + ' %}',
        text,
    )
    text = re.sub(r'@endforeach\b', '{% endfor %}', text)
    text = re.sub(
        r'@if\s*\((.*)\)\s*$',
        lambda m: '{% if ' + _blade_expression(m.group(1)) + ' %}',
        text,
        flags=re.M,
    )
    text = re.sub(r'@else\b', '{% else %}', text)
    text = re.sub(r'@endif\b', '{% endif %}', text)
    text = re.sub(
        r'\{!!\s*(.*?)\s*!!\}', lambda m: '{{ ' + _blade_expression(m.group(1)) + ' }}', text
    )
    text = re.sub(
        r'\{\{\s*(\$.*?)\s*\}\}', lambda m: '{{ ' + _blade_expression(m.group(1)) + ' }}', text
    )
    return with_layout(text, layout)


# Go templates (Hugo)


def go_template_to_liquid(text: str) -> str:
    """Convert Hugo Go templates to Liquid."""
    text = text.replace('{{-', '{{').replace('-}}', '}}')
    text = re.sub(
        r'\{\{\s*block\s+"main"\s+\.\s*\}\}\s*\{\{\s*end\s*\}\}', '{{ content }}', text
    )
    define = re.search(r'\{\{\s*define\s+"main"\s*\}\}\s*\n?', text)
    if define:
        text = text[: define.start()] + text[define.end():]
        last_end = list(re.finditer(r'\{\{\s*end\s*\}\}\s*\n?', text))
        if last_end:
            m = last_end[-1]
            text = text[: m.start()] + text[m.end():]
        text = with_layout(text, 'default')
    text = re.sub(
        r'\{\{\s*partial\s+"([^"]+)"\s*[^}]*\}\}',
        lambda m: '{% include ' + _include_name(m.group(1)) + ' %}',
        text,
    )
    text = re.sub(r'\{\{\s*\.Content\s*\}\}', '{{ content }}', text)
    text = re.sub(r'\{\{\s*\.Site\.Title\s*\}\}', '{{ site.title }}', text)
    text = re.sub(r'\{\{\s*\.Site\.BaseURL\s*\}\}', '{{ site.url }}', text)
    text = re.sub(r'\{\{\s*\.Title\s*\}\}', '{{ page.title }}', text)
    text = re.sub(r'\{\{\s*\.Summary\s*\}\}', '{{ page.excerpt }}', text)
    text = re.sub(
        r'\{\{\s*\.(?:Rel)?Permalink\s*\}\}', '{{ page.url | relative_url }}', text
    )
    text = re.sub(
        r'\{\{\s*\.Date\.Format\s+"[^"]*"\s*\}\}',
        '{{ page.date | date: "%Y-%m-%d" }}',
        text,
    )
    return text


# MkDocs markdown

_ADMONITION = re.compile(
    r'^!!![ \t]+(\w+)(?:[ \t]+"([^"]*)")?[ \t]*\n'
    r'((?:[ \t]+\S.*(?:\n|\Z)|[ \t]*\n(?=[ \t]+\S))+)',
    re.M,
)
_ADMONITION_CLASSES = {
    'note': 'info',
    'info': 'info',
    'tip': 'success',
    'success': 'success',
    'warning': 'warning',
    'danger': 'danger',
    'error': 'danger',
}


def convert_admonitions(text: str) -> str:
    """Rewrite ``!!! note "Title"`` blocks as HTML callouts."""

    def _replace(match: re.Match) -> str:
        kind = match.group(1).lower()
        title = match.group(2) if match.group(2) is not None else kind.capitalize()
        lines = match.group(3).splitlines()
        indent = min(
            (len(line) - len(line.lstrip()) for line in lines if line.strip()),
            default=0,
        )
        body = '\n'.join(line[indent:] for line in lines).strip('\n')
        css = _ADMONITION_CLASSES.get(kind, 'info')
        title_html = f'<p class="admonition-title">{title}</p>\n' if title else ''
        return (
            f'<div class="admonition {css}" markdown="1">\n'
            f'{title_html}\n{body}\n</div>\n'
        )

    return _ADMONITION.sub(_replace, text)


def rewrite_markdown_links(text: str, relative: str, collection: str) -> str:
    """Point relative ``.md`` links at Jekyll's ``link`` tag.

    Args:
        text: Markdown body
        relative: Path of the document inside its source subtree
        collection: Destination subtree, e.g. ``_docs``
    """
    base = PurePosixPath(relative).parent

    def _replace(match: re.Match) -> str:
        label, target, anchor = match.group(1), match.group(2), match.group(3) or ''
        if re.match(r'^[a-z]+:', target) or target.startswith('/'):
            return match.group(0)
        parts = []
        for part in (base / target).parts:
            if part == '..':
                if parts:
                    parts.pop()
            elif part != '.':
                parts.append(part)
        resolved = '/'.join([collection] + parts)
        return f'[{label}]({{% link {resolved} %}}{anchor})'

    return re.sub(r'\[([^\]]*)\]\(([^)\s#]+\.md)(#[^)\s]*)?\)', _replace, text)


def docs_permalink(relative: str) -> str:
    """Permalink a docs page would have had under MkDocs' directory URLs."""
    path = PurePosixPath(relative)
    parent = path.parent.as_posix()
    prefix = '' if parent == '.' else f'{parent}/'
    if path.stem in ('index', 'README'):
        return f'/{prefix}' if prefix else '/'
    return f'/{prefix}{path.stem}/'


# Stylesheets


def sass_asset_helpers(text: str) -> str:
    """Replace Sprockets/Middleman asset helpers with plain ``url()``."""
    return re.sub(r'\b(?:asset|image|font)[-_](?:path|url)\(', 'url(', text)

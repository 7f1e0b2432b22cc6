"""Tests for text transforms."""

from datetime import date, datetime

import pytest

from site_migrate.migration.transforms import (
    blade_to_liquid,
    chain,
    coerce_date,
    convert_admonitions,
    docs_permalink,
    ensure_front_matter,
    erb_to_liquid,
    go_template_to_liquid,
    handlebars_to_liquid,
    jinja_to_liquid,
    post_file_name,
    render_front_matter,
    rewrite_markdown_links,
    sass_asset_helpers,
    slugify,
    split_dated_stem,
    split_front_matter,
    strip_template_suffix,
    title_from_stem,
    with_layout,
)
from site_migrate.utils.exceptions import FrontMatterError, MigrationParseError


class TestFrontMatter:
    """Test front matter parsing and rendering."""

    def test_split_yaml(self):
        """Test YAML front matter is split from the body."""
        metadata, body, found = split_front_matter('---\ntitle: Hi\n---\nBody\n')

        assert metadata == {'title': 'Hi'}
        assert body.strip() == 'Body'
        assert found is True

    def test_split_toml(self):
        """Test TOML front matter is split from the body."""
        metadata, body, found = split_front_matter(
            '+++\ntitle = "Hi"\ndraft = false\n+++\nBody\n'
        )

        assert metadata == {'title': 'Hi', 'draft': False}
        assert body == 'Body\n'
        assert found is True

    def test_split_without_front_matter(self):
        """Test plain documents pass through."""
        text = '# Heading\n\nText\n'

        assert split_front_matter(text) == ({}, text, False)

    def test_invalid_yaml(self):
        """Test malformed YAML raises a parse error."""
        with pytest.raises(FrontMatterError):
            split_front_matter('---\ntitle: [unclosed\n---\nbody\n')

    def test_invalid_toml(self):
        """Test malformed TOML raises a parse error."""
        with pytest.raises(MigrationParseError):
            split_front_matter('+++\ntitle = \n+++\nbody\n')

    def test_render(self):
        """Test metadata is rendered in insertion order."""
        text = render_front_matter({'layout': 'post', 'title': 'Hi'}, 'Body')

        assert text.startswith('---\nlayout: post\ntitle: Hi\n---\n')
        assert text.endswith('Body\n')

    def test_render_without_metadata(self):
        """Test an empty mapping leaves the body alone."""
        assert render_front_matter({}, 'Body\n') == 'Body\n'

    def test_ensure_adds_missing_keys(self):
        """Test defaults are added to documents without front matter."""
        text = ensure_front_matter('# Hello\n', {'layout': 'post', 'title': 'Hello'})

        metadata, body, found = split_front_matter(text)
        assert found is True
        assert metadata == {'layout': 'post', 'title': 'Hello'}
        assert body.strip() == '# Hello'

    def test_ensure_keeps_existing_values(self):
        """Test existing keys win over defaults."""
        text = ensure_front_matter(
            '---\ntitle: Custom\n---\nText\n',
            {'layout': 'post', 'title': 'Other', 'permalink': None},
        )

        metadata, _, _ = split_front_matter(text)
        assert metadata == {'title': 'Custom', 'layout': 'post'}

    def test_ensure_propagates_invalid_front_matter(self):
        """Test malformed front matter is not silently replaced."""
        with pytest.raises(FrontMatterError):
            ensure_front_matter('---\n: : :\n  - [\n---\nx\n', {'layout': 'post'})

    def test_with_layout(self):
        """Test layout front matter is prefixed only when given."""
        assert with_layout('body', 'base') == '---\nlayout: base\n---\nbody'
        assert with_layout('body', None) == 'body'


class TestNaming:
    """Test naming helpers."""

    def test_title_from_stem(self):
        """Test file stems become titles."""
        assert title_from_stem('getting-started') == 'Getting Started'
        assert title_from_stem('my_first post') == 'My First Post'

    def test_slugify(self):
        """Test slug generation."""
        assert slugify('Hello, World!') == 'hello-world'
        assert slugify('  A  B_c ') == 'a-b-c'

    def test_coerce_date(self):
        """Test front matter date values."""
        assert coerce_date(datetime(2020, 1, 2, 3, 4)) == date(2020, 1, 2)
        assert coerce_date(date(2020, 1, 2)) == date(2020, 1, 2)
        assert coerce_date('2021-05-06 10:00') == date(2021, 5, 6)
        assert coerce_date('2021-13-40') is None
        assert coerce_date('soon') is None
        assert coerce_date(42) is None

    def test_split_dated_stem(self):
        """Test dated file names."""
        assert split_dated_stem('2020-01-31-hello') == (date(2020, 1, 31), 'hello')
        assert split_dated_stem('hello') == (None, 'hello')
        assert split_dated_stem('2020-02-30-bad') == (None, '2020-02-30-bad')

    def test_post_file_name(self):
        """Test post file names follow the dated convention."""
        assert post_file_name(date(2020, 1, 2), 'hi', '.md') == '2020-01-02-hi.md'

    def test_strip_template_suffix_prefers_longest(self):
        """Test the longest matching suffix is rewritten."""
        mapping = {'.erb': '', '.html.erb': '.html'}

        assert strip_template_suffix('index.html.erb', mapping) == 'index.html'
        assert strip_template_suffix('feed.xml', mapping) == 'feed.xml'

    def test_chain(self):
        """Test text rewrites compose in order."""
        transform = chain(str.upper, lambda text: text + '!')

        assert transform('abc', 'ignored.md') == 'ABC!'


class TestErb:
    """Test ERB conversion."""

    def test_yield(self):
        assert erb_to_liquid('<main><%= yield %></main>') == '<main>{{ content }}</main>'

    def test_partial(self):
        """Test partials become includes."""
        assert (
            erb_to_liquid('<%= partial "shared/footer" %>') == '{% include footer.html %}'
        )

    def test_page_data(self):
        """Test page data references."""
        assert erb_to_liquid('<%= current_page.data.title %>') == '{{ page.title }}'

    def test_comment(self):
        assert (
            erb_to_liquid('<%# note %>') == '{% comment %}note{% endcomment %}'
        )

    def test_each_loop(self):
        """Test each blocks become for loops."""
        text = '<% data.posts.each do |post| %>\n<%= post.title %>\n<% end %>'

        assert erb_to_liquid(text) == (
            '{% for post in site.data.posts %}\n{{ post.title }}\n{% endfor %}'
        )

    def test_conditionals(self):
        """Test if/else/end blocks."""
        text = '<% if current_page.data.draft %>x<% else %>y<% end %>'

        assert erb_to_liquid(text) == '{% if page.draft %}x{% else %}y{% endif %}'


class TestJinja:
    """Test Jinja-family conversion."""

    def test_child_template(self):
        """Test extends becomes layout front matter."""
        text = (
            '{% extends "base.html" %}\n'
            '{% block content %}\n<p>{{ page.title }}</p>\n{% endblock content %}\n'
        )

        assert jinja_to_liquid(text) == (
            '---\nlayout: base\n---\n<p>{{ page.title }}</p>\n'
        )

    def test_base_template(self):
        """Test the content block becomes the content placeholder."""
        text = '<main>{% block content %}{% endblock %}</main>'

        assert jinja_to_liquid(text) == '<main>{{ content }}</main>'

    def test_content_and_filters(self):
        assert jinja_to_liquid('{{ page.content | safe }}') == '{{ content }}'

    def test_include(self):
        assert (
            jinja_to_liquid('{% include "partials/nav.html" %}')
            == '{% include nav.html %}'
        )

    def test_statements(self):
        """Test set and elif are rewritten."""
        assert jinja_to_liquid('{% set x = 1 %}') == '{% assign x = 1 %}'
        assert (
            jinja_to_liquid('{% if a %}{% elif b %}{% endif %}')
            == '{% if a %}{% elsif b %}{% endif %}'
        )

    def test_urls_and_globals(self):
        """Test Zola and Pelican globals."""
        assert (
            jinja_to_liquid("{{ get_url(path='style.css') }}")
            == "{{ '/style.css' | relative_url }}"
        )
        assert jinja_to_liquid('{{ SITENAME }}') == '{{ site.title }}'
        assert jinja_to_liquid('{{ config.base_url }}') == '{{ site.url }}'


class TestHandlebars:
    """Test Handlebars conversion."""

    def test_contents(self):
        assert handlebars_to_liquid('{{{ contents }}}') == '{{ content }}'

    def test_partial(self):
        assert handlebars_to_liquid('{{> header }}') == '{% include header.html %}'

    def test_each(self):
        """Test each blocks iterate with an item variable."""
        text = '{{#each posts}}<li>{{this.title}}</li>{{/each}}'

        assert handlebars_to_liquid(text) == (
            '{% for item in posts %}<li>{{item.title}}</li>{% endfor %}'
        )

    def test_if_else(self):
        assert (
            handlebars_to_liquid('{{#if draft}}D{{else}}P{{/if}}')
            == '{% if draft %}D{% else %}P{% endif %}'
        )


class TestBlade:
    """Test Blade conversion."""

    def test_child_template(self):
        """Test extends and sections."""
        text = (
            "@extends('_layouts.main')\n"
            "@section('content')\n<h1>{{ $page->title }}</h1>\n@endsection\n"
        )

        assert blade_to_liquid(text) == (
            '---\nlayout: main\n---\n<h1>{{ page.title }}</h1>\n'
        )

    def test_yield_and_include(self):
        assert blade_to_liquid("@yield('content')") == '{{ content }}'
        assert (
            blade_to_liquid("@include('_partials.footer')") == '{% include footer.html %}'
        )

    def test_foreach(self):
        assert (
            blade_to_liquid('@foreach ($posts as $post)x@endforeach')
            == '{% for post in posts %}x{% endfor %}'
        )

    def test_raw_content(self):
        assert blade_to_liquid('{!! $page->getContent() !!}') == '{{ content }}'


class TestGoTemplate:
    """Test Hugo template conversion."""

    def test_define_main(self):
        """Test a main definition becomes a default-layout page."""
        text = '{{ define "main" }}\n<h1>{{ .Title }}</h1>\n{{ .Content }}\n{{ end }}\n'

        assert go_template_to_liquid(text) == (
            '---\nlayout: default\n---\n<h1>{{ page.title }}</h1>\n{{ content }}\n'
        )

    def test_block_main(self):
        assert go_template_to_liquid('{{ block "main" . }}{{ end }}') == '{{ content }}'

    def test_partial(self):
        assert (
            go_template_to_liquid('{{ partial "header.html" . }}')
            == '{% include header.html %}'
        )

    def test_site_and_page_variables(self):
        """Test common variables and whitespace trimming."""
        assert go_template_to_liquid('{{ .Site.Title }}') == '{{ site.title }}'
        assert go_template_to_liquid('{{ .Permalink }}') == '{{ page.url | relative_url }}'
        assert go_template_to_liquid('{{- .Title -}}') == '{{ page.title }}'


class TestMkDocsMarkdown:
    """Test MkDocs markdown rewrites."""

    def test_admonition_with_title(self):
        """Test titled admonitions become callouts."""
        text = convert_admonitions('!!! note "Heads up"\n    Be careful.\n\nAfter\n')

        assert '<div class="admonition info" markdown="1">' in text
        assert '<p class="admonition-title">Heads up</p>' in text
        assert '\nBe careful.\n</div>\n' in text
        assert text.endswith('\nAfter\n')

    def test_admonition_default_title(self):
        text = convert_admonitions('!!! warning\n    x\n')

        assert 'admonition warning' in text
        assert '<p class="admonition-title">Warning</p>' in text

    def test_admonition_without_title(self):
        text = convert_admonitions('!!! tip ""\n    x\n')

        assert 'admonition success' in text
        assert 'admonition-title' not in text

    def test_rewrite_links(self):
        """Test relative markdown links use the link tag."""
        text = rewrite_markdown_links(
            'See [install](install.md#req) and [site](https://x.com/a.md).',
            'guide/index.md',
            '_docs',
        )

        assert '[install]({% link _docs/guide/install.md %}#req)' in text
        assert '[site](https://x.com/a.md)' in text

    def test_rewrite_parent_links(self):
        text = rewrite_markdown_links('[home](../index.md)', 'guide/setup.md', '_docs')

        assert text == '[home]({% link _docs/index.md %})'

    def test_docs_permalink(self):
        """Test MkDocs directory URLs."""
        assert docs_permalink('index.md') == '/'
        assert docs_permalink('guide/index.md') == '/guide/'
        assert docs_permalink('guide/setup.md') == '/guide/setup/'
        assert docs_permalink('about.md') == '/about/'


def test_sass_asset_helpers():
    """Test asset helpers become plain url() calls."""
    assert sass_asset_helpers("background: image-url('bg.png');") == (
        "background: url('bg.png');"
    )
    assert sass_asset_helpers('src: asset_path("a.woff")') == 'src: url("a.woff")'

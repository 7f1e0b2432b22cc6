"""Tests for engine detection and the registry."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from site_migrate.engines import ENGINE_CLASSES, EleventyEngine, HugoEngine
from site_migrate.migration.registry import EngineRegistry, default_registry
from site_migrate.utils.exceptions import EngineDetectionError, UnknownEngineError

# Minimal marker sets that only one engine recognises
FIXTURES = {
    'Gatsby': {'gatsby-config.js': 'module.exports = {}\n'},
    'Eleventy': {'.eleventy.js': 'module.exports = () => ({})\n'},
    'Metalsmith': {'metalsmith.json': '{"source": "src"}\n'},
    'Bridgetown': {'bridgetown.config.yml': 'url: ""\n'},
    'Jigsaw': {'config.php': '<?php return [];\n'},
    'Octopress': {'Rakefile': '# Octopress rake tasks\n'},
    'Slate': {'source/index.html.md': '---\ntitle: API Reference\n---\n# Intro\n'},
    'Middleman': {'config.rb': 'activate :blog\n'},
    'Pelican': {'pelicanconf.py': "SITENAME = 'Blog'\n"},
    'Nikola': {'conf.py': "BLOG_TITLE = 'Blog'\n"},
    'MkDocs': {'mkdocs.yml': 'site_name: Docs\n'},
    'Hugo': {'hugo.toml': 'title = "Hugo"\n'},
    'Zola': {
        'config.toml': 'title = "Zola"\n',
        'templates/index.html': '<html></html>\n',
        'content/_index.md': '+++\n+++\n',
    },
    'Nanoc': {'nanoc.yaml': 'data_sources: []\n'},
}


class TestDefaultRegistry:
    """Test the built-in registry."""

    def setup_method(self):
        """Set up test fixtures."""
        self.registry = default_registry()

    def test_detection_order(self):
        """Test engines are registered in detection order."""
        assert self.registry.names() == [
            'Gatsby',
            'Eleventy',
            'Metalsmith',
            'Bridgetown',
            'Jigsaw',
            'Octopress',
            'Slate',
            'Middleman',
            'Pelican',
            'Nikola',
            'MkDocs',
            'Hugo',
            'Zola',
            'Nanoc',
        ]
        assert len(self.registry) == len(ENGINE_CLASSES)

    @pytest.mark.parametrize('engine_name', sorted(FIXTURES))
    def test_each_engine_detects_only_its_fixture(self, engine_name, make_site):
        """Test each marker set selects exactly one engine."""
        site = make_site(FIXTURES[engine_name])

        assert [e.name for e in self.registry.candidates(site)] == [engine_name]
        assert self.registry.select(site).name == engine_name

    def test_nothing_detected(self, make_site):
        site = make_site({'notes.txt': 'hello\n'})

        assert self.registry.select(site) is None
        assert self.registry.candidates(site) == []

    def test_first_match_wins(self, make_site):
        """Test overlapping markers resolve to the earlier engine."""
        site = make_site(
            {
                'package.json': '{"devDependencies": {"@11ty/eleventy": "^2.0.0"}}',
                'mkdocs.yml': 'site_name: Docs\n',
            }
        )

        assert self.registry.resolve(site).name == 'Eleventy'
        assert [e.name for e in self.registry.candidates(site)] == ['Eleventy', 'MkDocs']

    def test_hugo_legacy_config_needs_archetypes(self, make_site):
        """Test config.toml alone is not enough for Hugo."""
        bare = make_site({'config.toml': 'title = "x"\n'})
        hugo = make_site({'config.toml': 'title = "x"\n', 'archetypes/default.md': ''})

        assert self.registry.select(bare) is None
        assert self.registry.select(hugo).name == 'Hugo'

    def test_gatsby_dependency_in_package_json(self, make_site):
        site = make_site({'package.json': '{"dependencies": {"gatsby": "^5.0.0"}}'})

        assert self.registry.select(site).name == 'Gatsby'

    def test_similar_package_names_do_not_match(self, make_site):
        """Test dependency checks match whole package names."""
        site = make_site({'package.json': '{"dependencies": {"gatsby-plugin-x": "1"}}'})

        assert self.registry.select(site) is None

    def test_detection_is_read_only(self, make_site):
        """Test detection does not touch the source tree."""
        site = make_site(FIXTURES['Zola'])
        before = sorted(p.relative_to(site) for p in site.rglob('*'))

        self.registry.candidates(site)

        assert sorted(p.relative_to(site) for p in site.rglob('*')) == before


class TestEngineLookup:
    """Test lookup by name and alias."""

    def setup_method(self):
        """Set up test fixtures."""
        self.registry = default_registry()

    def test_get_by_name_ignores_case(self):
        assert self.registry.get('HUGO').name == 'Hugo'
        assert self.registry.get(' mkdocs ').name == 'MkDocs'

    def test_get_by_alias(self):
        assert self.registry.get('11ty').name == 'Eleventy'

    def test_unknown_engine(self):
        """Test unknown names list the supported engines."""
        with pytest.raises(UnknownEngineError) as exc_info:
            self.registry.get('jekyll')

        message = str(exc_info.value)
        assert message.startswith('Unsupported engine: jekyll')
        assert 'gatsby' in message and 'nanoc' in message
        assert exc_info.value.available[0] == 'gatsby'

    def test_resolve_explicit_engine_skips_detection(self, tmp_path):
        """Test an explicit engine is used even if nothing is detected."""
        assert self.registry.resolve(tmp_path, 'zola').name == 'Zola'

    def test_resolve_without_match(self, tmp_path):
        with pytest.raises(EngineDetectionError) as exc_info:
            self.registry.resolve(tmp_path)

        assert 'Could not detect the site generator' in str(exc_info.value)
        assert exc_info.value.path == Path(tmp_path)


class TestCustomRegistry:
    """Test registries built from explicit engine lists."""

    def test_order_is_preserved(self, make_site):
        """Test a registry honours the order it was given."""
        registry = EngineRegistry([HugoEngine(), EleventyEngine()])
        site = make_site({'hugo.toml': '', '.eleventy.js': ''})

        assert registry.names() == ['Hugo', 'Eleventy']
        assert registry.select(site).name == 'Hugo'

    def test_iteration(self):
        registry = EngineRegistry([HugoEngine()])

        assert [engine.name for engine in registry] == ['Hugo']

    def test_resolve_stops_at_first_match(self, tmp_path):
        """Test later detectors are not consulted once an engine matches."""
        first, second = Mock(), Mock()
        first.name, second.name = 'First', 'Second'
        first.detect.return_value = True
        second.detect.return_value = True
        registry = EngineRegistry([first, second])

        assert registry.resolve(tmp_path) is first
        second.detect.assert_not_called()

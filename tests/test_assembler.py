"""
Unit tests for bundle assembly and the runtime templates.
"""
import pytest

from modpack.assembler import assemble, entry_point_map, get_use_section, wrap
from modpack.registry import ModuleRegistry
from modpack.runtime import get_loader_template, get_use_template


@pytest.fixture
def registry():
    registry = ModuleRegistry()
    registry.record('a')
    registry.record('b')
    return registry


class TestEntryPointMap:
    """Tests for the names exposed through use()."""

    def test_no_entrance_exposes_everything(self, registry):
        assert entry_point_map(registry) == {'a': 0, 'b': 1}

    def test_registered_entrance_exposed_alone(self, registry):
        assert entry_point_map(registry, 'b') == {'b': 1}

    def test_unknown_entrance_falls_back_to_all(self, registry):
        """An entrance that is not a module exposes every module, not nothing."""
        assert entry_point_map(registry, 'missing') == {'a': 0, 'b': 1}


class TestTemplates:
    """Tests for the runtime template files."""

    def test_loader_has_placeholders(self):
        template = get_loader_template()
        assert '$name' in template
        assert template.count('$source;') == 1

    def test_use_has_placeholders(self):
        template = get_use_template()
        assert '$mapping' in template
        assert 'function use(name)' in template


class TestAssemble:
    """Tests for assemble()."""

    def test_wrap_inserts_source_once(self):
        """Modules go where $source; was, placeholders are filled."""
        result = wrap('_p[0]={\nvalue: 1};')
        assert result.count('_p[0]={\nvalue: 1};') == 1
        assert 'var _p = {' in result
        assert '$name' not in result
        assert '$source' not in result

    def test_wrap_does_not_touch_module_text(self):
        """Placeholder names inside modules are left as written."""
        result = wrap('var s = "$name";')
        assert 'var s = "$name";' in result

    def test_use_section(self, registry):
        """The entry section maps names to slots and resolves through the table."""
        section = get_use_section(registry)
        assert 'var moduleMapping = {"a": 0, "b": 1};' in section
        assert 'return _p.r(moduleMapping[name]);' in section

    def test_use_section_with_entrance(self, registry):
        section = get_use_section(registry, entrance='a')
        assert 'var moduleMapping = {"a": 0};' in section

    def test_assemble_order(self, registry):
        """Loader first, then the modules, then the entry helper."""
        bundle = assemble('_p[0]={\nvalue: 1};', registry)
        loader_at = bundle.index('var _p = {')
        module_at = bundle.index('_p[0]={')
        use_at = bundle.index('function use(name)')
        assert loader_at < module_at < use_at

    def test_loader_memoizes(self):
        """The loader checks and sets the inited flag."""
        bundle = wrap('')
        assert 'if (entry.inited)' in bundle
        assert 'entry.inited = true;' in bundle
        assert 'entry.value(null, module.exports, module)' in bundle

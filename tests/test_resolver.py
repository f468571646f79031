"""Tests for the resolver module."""

import logging

import pytest

from peptide_hit_utils.modifications import (
    C_TERMINAL_TYPES,
    N_TERMINAL_TYPES,
    ModificationCatalog,
    ModificationDefinition,
    ModificationType,
)
from peptide_hit_utils.resolver import MassShiftResolver, TieBreakPolicy, candidate_phases


@pytest.fixture
def catalog():
    return ModificationCatalog([
        ModificationDefinition(15.994915, 'M', ModificationType.DYNAMIC),                  # *
        ModificationDefinition(57.021464, 'C', ModificationType.STATIC),                   # -
        ModificationDefinition(42.010565, '<', ModificationType.DYN_NTERM_PEPTIDE),        # #
        ModificationDefinition(79.966331, 'STY', ModificationType.DYNAMIC),                # @
        ModificationDefinition(42.010565, 'K', ModificationType.DYNAMIC),                  # $
    ])


@pytest.fixture
def resolver(catalog):
    return MassShiftResolver(catalog)


class TestResolve:
    def test_exact_match(self, resolver):
        result = resolver.resolve('+15.994915', residue='M')
        assert result.symbols == '*'
        assert result.success
        assert result.residual == pytest.approx(0.0, abs=1e-12)

    def test_rounded_mass(self, resolver):
        result = resolver.resolve('+15.995', residue='M')
        assert result.symbols == '*'
        assert result.mass == pytest.approx(15.995)

    def test_no_match_keeps_text(self, resolver):
        result = resolver.resolve('+100.5', residue='A')
        assert result.symbols == '+100.5'
        assert not result.success
        assert result.unresolved == ['+100.5']
        assert result.mass == pytest.approx(100.5)

    def test_static_emits_no_symbol(self, resolver):
        result = resolver.resolve('+57.021', residue='C')
        assert result.symbols == ''
        assert result.contains_static
        assert result.success
        assert result.mass == pytest.approx(57.021)

    def test_multiple_tokens(self, resolver):
        result = resolver.resolve('+79.966+15.995', residue='S')
        assert result.symbols == '@*'
        assert result.matched == 2
        assert result.mass == pytest.approx(95.961)

    def test_partial_match(self, resolver):
        result = resolver.resolve('+15.995+300.1', residue='M')
        assert result.symbols == '*+300.1'
        assert result.success
        assert result.unresolved == ['+300.1']

    def test_negative_token(self, resolver):
        result = resolver.resolve('-300.1')
        assert result.symbols == '-300.1'
        assert result.mass == pytest.approx(-300.1)

    def test_unresolved_warning(self, resolver, caplog):
        with caplog.at_level(logging.WARNING):
            resolver.resolve('+100.5')
        assert 'No modification' in caplog.text


class TestTerminalPhases:
    def test_n_terminal_prefers_n_term_class(self, resolver):
        assert resolver.resolve('+42.011', n_terminal=True, residue='K').symbols == '#'

    def test_internal_prefers_residue_match(self, resolver):
        assert resolver.resolve('+42.011', residue='K').symbols == '$'

    def test_n_terminal_falls_back(self, resolver):
        assert resolver.resolve('+15.995', n_terminal=True, residue='M').symbols == '*'

    def test_c_terminal_prefers_c_term_class(self):
        catalog = ModificationCatalog([
            ModificationDefinition(14.01565, 'DE', ModificationType.DYNAMIC),            # *
            ModificationDefinition(14.01565, '>', ModificationType.DYN_CTERM_PEPTIDE),   # #
        ])
        resolver = MassShiftResolver(catalog)
        assert resolver.resolve('+14.016', residue='E').symbols == '*'
        assert resolver.resolve('+14.016', possible_c_terminal=True, residue='E').symbols == '#'

    def test_c_term_mod_used_internally_as_last_resort(self):
        catalog = ModificationCatalog([
            ModificationDefinition(-0.984016, '>', ModificationType.DYN_CTERM_PEPTIDE),
        ])
        assert MassShiftResolver(catalog).resolve('-0.984', residue='G').symbols == '*'

    def test_phase_order(self):
        phases = candidate_phases(n_terminal=True, possible_c_terminal=True)
        assert phases[0] == N_TERMINAL_TYPES
        assert phases[1] == C_TERMINAL_TYPES
        assert ModificationType.CUSTOM_AA not in phases[-1]

    def test_internal_phases_skip_c_term_first(self):
        phases = candidate_phases(n_terminal=False, possible_c_terminal=False)
        assert not (phases[0] & C_TERMINAL_TYPES)
        assert C_TERMINAL_TYPES <= phases[-1]


class TestTieBreakPolicy:
    @pytest.fixture
    def tied_catalog(self):
        return ModificationCatalog([
            ModificationDefinition(57.021464, 'C', ModificationType.STATIC),
            ModificationDefinition(57.021464, 'C', ModificationType.DYNAMIC),   # *
        ])

    def test_residue_keeps_catalog_order(self, tied_catalog):
        result = MassShiftResolver(tied_catalog, TieBreakPolicy.RESIDUE).resolve('+57.021', residue='C')
        assert result.contains_static
        assert result.symbols == ''

    def test_dynamic(self, tied_catalog):
        result = MassShiftResolver(tied_catalog, TieBreakPolicy.DYNAMIC).resolve('+57.021', residue='C')
        assert result.symbols == '*'
        assert not result.contains_static

    def test_static(self, tied_catalog):
        result = MassShiftResolver(tied_catalog, TieBreakPolicy.STATIC).resolve('+57.021', residue='C')
        assert result.contains_static

    def test_residue_beats_generic(self):
        catalog = ModificationCatalog([
            ModificationDefinition(0.984016, '', ModificationType.DYNAMIC),     # *
            ModificationDefinition(0.984016, 'NQ', ModificationType.DYNAMIC, symbol='#'),
        ])
        assert MassShiftResolver(catalog).resolve('+0.984', residue='N').symbols == '#'
        assert MassShiftResolver(catalog).resolve('+0.984', residue='R').symbols == '*'

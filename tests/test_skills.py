"""Tests for the skill dictionary and whole-token skill detection."""

import pytest

from parsers.skills import (
    ALL_SKILLS,
    TERM_TO_CANONICAL,
    find_dictionary_skills,
    related_dictionary_term,
    skill_pattern,
)


class TestDictionary:
    """The dictionary itself"""

    def test_entries_are_lowercase_and_unique(self):
        assert all(s == s.lower() for s in ALL_SKILLS)
        assert len(ALL_SKILLS) == len(set(ALL_SKILLS))

    def test_aliases_map_to_canonical(self):
        assert TERM_TO_CANONICAL["js"] == "javascript"
        assert TERM_TO_CANONICAL["k8s"] == "kubernetes"
        assert TERM_TO_CANONICAL["python"] == "python"

    @pytest.mark.parametrize("skill", ALL_SKILLS)
    def test_every_entry_found_as_standalone_word(self, skill):
        assert skill in find_dictionary_skills(f"Experienced with {skill} daily")


class TestFindDictionarySkills:
    """Whole-token matching over free text"""

    def test_deterministic(self):
        text = "Python, React and AWS. Also Docker, Kubernetes, C++ and C#."
        assert find_dictionary_skills(text) == find_dictionary_skills(text)

    def test_case_insensitive(self):
        assert "python" in find_dictionary_skills("PYTHON developer")

    def test_symbols_in_entries_are_literal(self):
        found = find_dictionary_skills("Worked with C++ and C# on .NET")
        assert "c++" in found
        assert "c#" in found
        assert ".net" in found

    def test_single_letter_language_needs_its_own_token(self):
        assert "c" not in find_dictionary_skills("C++ and C# only")
        assert "c" in find_dictionary_skills("Embedded C, some assembly")

    def test_no_match_inside_other_words(self):
        found = find_dictionary_skills("javascripting and pythonic prose")
        assert "javascript" not in found
        assert "python" not in found

    def test_dotted_names_do_not_leak(self):
        found = find_dictionary_skills("Built sites with ASP.NET")
        assert "asp.net" in found
        assert ".net" not in found

    def test_alias_reports_canonical(self):
        found = find_dictionary_skills("Deployed with k8s, wrote nodejs services")
        assert "kubernetes" in found
        assert "node.js" in found
        assert "k8s" not in found

    def test_multiword_allows_any_whitespace(self):
        assert "aws" in find_dictionary_skills("Amazon   Web\nServices")

    def test_empty(self):
        assert find_dictionary_skills("") == []
        assert find_dictionary_skills(None) == []


class TestSkillPattern:
    def test_escapes_metacharacters(self):
        pattern = skill_pattern("c++")
        assert pattern.search("c++ developer")
        assert not pattern.search("cxx developer")


class TestRelatedDictionaryTerm:
    def test_exact_term(self):
        assert related_dictionary_term("Python")
        assert related_dictionary_term("go")

    def test_substring_relation_for_longer_tokens(self):
        assert related_dictionary_term("postgresql 14")

    def test_short_unknown_tokens_rejected(self):
        assert not related_dictionary_term("xyz")
        assert not related_dictionary_term("")

    def test_unrelated_token(self):
        assert not related_dictionary_term("basket weaving")

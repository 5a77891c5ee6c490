"""Word roles and the static vocabulary.

A word may carry several grammatical roles at once ("pump" is both a verb
and a noun, "in" is both a preposition and a direction). Which role a word
plays in a given sentence is decided here, from the word and the slot it
occupies, using the precedence tables below. The parser never guesses on
its own.
"""

from dataclasses import dataclass, field
from enum import StrEnum


class Role(StrEnum):
    VERB = "verb"
    NOUN = "noun"
    ADJECTIVE = "adjective"
    PREPOSITION = "preposition"
    DIRECTION = "direction"
    IGNORABLE = "ignorable"
    UNKNOWN = "unknown"


class Slot(StrEnum):
    """Where in a sentence a word appears."""

    COMMAND = "command"  # first content word
    MOTION = "motion"  # first word after a motion verb ("go", "climb")
    OBJECT = "object"  # inside a noun phrase


class Arity(StrEnum):
    NONE = "none"
    OPTIONAL = "optional"
    REQUIRED = "required"


# Role reported for a word looked up without any context.
ROLE_PRECEDENCE: tuple[Role, ...] = (
    Role.VERB,
    Role.DIRECTION,
    Role.PREPOSITION,
    Role.NOUN,
    Role.ADJECTIVE,
    Role.IGNORABLE,
)

# Roles a slot accepts, strongest first. NOUN and ADJECTIVE share a rank in
# the object slot: the last word of a clause is its head noun, earlier words
# are filters.
SLOT_PRECEDENCE: dict[Slot, tuple[Role, ...]] = {
    Slot.COMMAND: (Role.VERB, Role.DIRECTION),
    Slot.MOTION: (Role.DIRECTION, Role.PREPOSITION, Role.NOUN, Role.ADJECTIVE),
    Slot.OBJECT: (Role.PREPOSITION, Role.NOUN, Role.ADJECTIVE),
}


@dataclass(frozen=True)
class Word:
    """A known word, every role it may carry and its canonical form per role."""

    text: str
    roles: frozenset[Role]
    canonical: dict[Role, str] = field(default_factory=dict, compare=False)

    def canonical_for(self, role: Role) -> str:
        return self.canonical.get(role, self.text)


@dataclass(frozen=True)
class VerbSyntax:
    arity: Arity = Arity.OPTIONAL
    literal: bool = False
    motion: bool = False


@dataclass
class Vocabulary:
    """The static word corpus, built once by the loader."""

    words: dict[str, Word] = field(default_factory=dict)
    abbreviations: dict[str, str] = field(default_factory=dict)
    syntax: dict[str, VerbSyntax] = field(default_factory=dict)
    phrasal: dict[tuple[str, str], str] = field(default_factory=dict)

    def add(self, text: str, role: Role, canonical: str | None = None) -> None:
        """Register `text` with `role`, keeping any roles it already has."""
        text = text.lower()
        existing = self.words.get(text)
        roles = {role} | (set(existing.roles) if existing else set())
        mapping = dict(existing.canonical) if existing else {}
        if canonical is not None:
            mapping.setdefault(role, canonical)
        self.words[text] = Word(text, frozenset(roles), mapping)

    def expand_abbreviation(self, text: str) -> str:
        return self.abbreviations.get(text, text)

    def is_known(self, text: str) -> bool:
        return text in self.words

    def roles(self, text: str) -> frozenset[Role]:
        word = self.words.get(text)
        return word.roles if word else frozenset()

    def lookup_word(self, text: str) -> Role:
        """Return the context-free role of `text`, or Role.UNKNOWN."""
        roles = self.roles(text)
        for role in ROLE_PRECEDENCE:
            if role in roles:
                return role
        return Role.UNKNOWN

    def resolve_role(self, text: str, slot: Slot, *, last: bool = True) -> Role:
        """Return the role `text` plays in `slot`.

        `last` says whether the word ends its clause; it only matters for
        words that are both nouns and adjectives. Returns Role.UNKNOWN when
        the word has no role the slot accepts.
        """
        roles = self.roles(text)
        if slot is Slot.OBJECT and Role.PREPOSITION not in roles:
            if {Role.NOUN, Role.ADJECTIVE} <= roles:
                return Role.NOUN if last else Role.ADJECTIVE
        for role in SLOT_PRECEDENCE[slot]:
            if role in roles:
                return role
        return Role.UNKNOWN

    def canonical(self, text: str, role: Role) -> str:
        word = self.words.get(text)
        return word.canonical_for(role) if word else text

    def verb_syntax(self, verb: str) -> VerbSyntax:
        return self.syntax.get(verb, VerbSyntax())

    def phrasal_verb(self, verb: str, particle: str) -> str | None:
        """Return the verb that `verb` + `particle` stands for, if any."""
        return self.phrasal.get((verb, particle))

    def __len__(self) -> int:
        return len(self.words)

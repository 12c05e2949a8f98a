from __future__ import annotations
from typing import Dict, List, Tuple

KNOWLEDGE_NAMES: Dict[str, str] = {
    "atom-structure": "Atomic structure",
    "periodic-table": "The periodic table",
    "periodic-law": "The periodic law",
    "ionic-bond": "Ionic bonds",
    "covalent-bond": "Covalent bonds",
    "metallic-bond": "Metallic bonds",
    "galvanic-cell": "Galvanic cells",
    "electrolysis": "Electrolytic cells",
    "chemical-equilibrium": "Chemical equilibrium",
    "titration": "Acid-base titration",
    "benzene": "Benzene and its homologues",
    "redox-reaction": "Redox reactions",
}

DEFAULT_KNOWLEDGE_NAME = "Chemistry"

GENERIC_ANSWER = ("That's a good question! Watch the demonstration closely and relate it to what your "
                  "textbook says. If you are still unsure, try changing the parameters and see how the "
                  "result changes.")

# knowledge id -> (default answer, [(keywords, answer), ...]); first keyword hit wins
PRESET_ANSWERS: Dict[str, Tuple[str, List[Tuple[Tuple[str, ...], str]]]] = {
    "atom-structure": (
        "An atom is a nucleus (protons and neutrons) surrounded by electrons. Electrons fill shells in order "
        "of energy: at most 2 in the first shell, 8 in the second and 18 in the third (8 when it is the "
        "outermost shell).",
        [
            (("electron", "电子"), "Electrons fill the lowest-energy orbitals first (the aufbau principle)."),
            (("proton", "质子"), "The number of protons equals the atomic number and decides the element. Atoms "
                                 "with the same proton count are the same element."),
        ],
    ),
    "ionic-bond": (
        "An ionic bond is the electrostatic attraction between cations and anions. It usually forms between "
        "a reactive metal and a reactive non-metal, as between Na+ and Cl- in NaCl.",
        [
            (("form", "形成"), "A reactive metal atom loses electrons to become a cation, a reactive non-metal "
                               "atom gains them to become an anion, and the ions are held together by "
                               "electrostatic attraction."),
            (("propert", "性质"), "Ionic compounds have high melting and boiling points, are hard, and conduct "
                                  "electricity when molten or dissolved in water."),
        ],
    ),
    "covalent-bond": (
        "A covalent bond is a shared pair of electrons between two atoms. Depending on how many pairs are "
        "shared it is a single, double or triple bond.",
        [
            (("polar", "极性"), "In a polar covalent bond the shared pair is pulled toward the more "
                                "electronegative atom; in a non-polar bond it is shared equally."),
            (("form", "形成"), "When a covalent bond forms, atomic orbitals overlap, electron density between "
                               "the nuclei increases and the energy of the system drops."),
        ],
    ),
    "galvanic-cell": (
        "A galvanic cell turns chemical energy into electrical energy. Oxidation (loss of electrons) happens "
        "at the negative electrode and reduction at the positive electrode; electrons flow from negative to "
        "positive through the external circuit.",
        [
            (("condition", "条件"), "A galvanic cell needs: 1) two electrodes of different reactivity, "
                                    "2) an electrolyte, 3) a closed circuit."),
            (("electrode", "电极"), "Negative electrode: the more reactive metal, where oxidation happens. "
                                    "Positive electrode: the less reactive metal or conductor, where "
                                    "reduction happens."),
        ],
    ),
    "chemical-equilibrium": (
        "Chemical equilibrium is the dynamic state a reversible reaction reaches when the forward and "
        "reverse rates are equal and every concentration stays constant.",
        [
            (("shift", "移动"), "Le Chatelier's principle: when a condition changes, the equilibrium shifts "
                                "in the direction that counteracts the change."),
            (("constant", "常数"), "The equilibrium constant K depends only on temperature, not on "
                                   "concentration or pressure. The larger K, the further the reaction goes."),
        ],
    ),
}

KNOWLEDGE_HINTS: Dict[str, List[str]] = {
    "atom-structure": [
        "The nucleus is made of protons and neutrons",
        "Electrons fill shells in order of energy",
        "The outer-shell electron count decides chemical behaviour",
        "Elements in the same period have the same number of shells",
    ],
    "ionic-bond": [
        "Ionic bonds form by electrostatic attraction between cations and anions",
        "Reactive metals and reactive non-metals tend to form ionic bonds",
        "Ionic compounds conduct when molten or dissolved",
        "Ionic crystals have high melting points and are hard",
    ],
    "covalent-bond": [
        "Covalent bonds form by sharing electron pairs",
        "Single, double and triple bonds share 1, 2 and 3 pairs",
        "In a polar bond the pair leans toward the more electronegative atom",
        "Covalent network crystals have very high melting points",
    ],
    "galvanic-cell": [
        "Oxidation at the negative electrode, reduction at the positive",
        "Electrons flow from negative to positive through the wire",
        "Conventional current runs opposite to electron flow",
        "The salt bridge keeps both solutions electrically neutral",
    ],
    "chemical-equilibrium": [
        "At equilibrium the forward and reverse rates are equal",
        "K depends only on temperature",
        "A catalyst does not move the equilibrium position",
        "Le Chatelier's principle predicts the direction of a shift",
    ],
}

GENERIC_HINTS = [
    "Watch the demonstration closely",
    "Relate what you see to your textbook",
    "Try adjusting the parameters and watch what changes",
]


def knowledge_name(knowledge_id: str) -> str:
    return KNOWLEDGE_NAMES.get(knowledge_id, DEFAULT_KNOWLEDGE_NAME)


def preset_answer(knowledge_id: str, question: str) -> str:
    """
    Offline answer: keyword match within the topic, then the topic default,
    then a generic encouragement.
    """
    entry = PRESET_ANSWERS.get(knowledge_id)
    if entry is None:
        return GENERIC_ANSWER
    default, keyed = entry
    q = (question or "").lower()
    for keywords, answer in keyed:
        if any(k in q for k in keywords):
            return answer
    return default


def knowledge_hints(knowledge_id: str) -> List[str]:
    return list(KNOWLEDGE_HINTS.get(knowledge_id, GENERIC_HINTS))

"""Global keyword rules used for Tier-2 classification.

Rules are evaluated in order and the first keyword contained in the lowercased
description wins, so the ordering below is part of the behavior: Transport is
checked first because its keywords (``bilet``, ``abonament transport``) would
otherwise be claimed by Subscripții, and Transfer Intern precedes Transferuri.

Keywords are plain substrings, not whole words: ``"ct"`` matches inside
``"contact"`` and ``"bar"`` inside ``"barcelona"``. Short keywords are kept for
parity with existing user data even though they over-match.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CategoryRule:
    category_name: str
    keywords: tuple[str, ...]
    description: str
    icon: str = "📋"


CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        category_name="Transport",
        description=(
            "Transport în comun sau cheltuieli cu mijlocul personal de transport "
            "(benzină, service auto, taxi, Uber)"
        ),
        icon="🚗",
        keywords=(
            # fuel stations (RO)
            "petrom",
            "omv",
            "rompetrol",
            "mol",
            "lukoil",
            "socar",
            "benzinarie",
            # public transport
            "metrorex",
            "ratb",
            "stb",
            "bilet metrou",
            "abonament transport",
            "transport",
            "transport for london",
            # ride-sharing
            "uber",
            "bolt",
            "taxi",
            "clever",
            "freenow",
            # parking
            "parcare",
            "parking",
            "easypark",
            # car service
            "service auto",
            "vulcanizare",
            "spalatorie auto",
            "itp",
            "rca",
            "rovinieta",
            # international
            "shell",
            "bp",
            "esso",
            "fuel",
            "gas station",
        ),
    ),
    CategoryRule(
        category_name="Cumpărături",
        description="Tot ce ține de market, supermarket și cumpărături online (haine, electronice, mobilă)",
        icon="🛍️",
        keywords=(
            # groceries
            "kaufland",
            "lidl",
            "carrefour",
            "mega image",
            "mega-image",
            "megaimage",
            "profi",
            "penny",
            "auchan",
            "cora",
            "hypermarket",
            "selgros",
            "metro",
            "la doi pasi",
            "fresh",
            "piata",
            "tesco",
            "sainsbury",
            "asda",
            "waitrose",
            "aldi",
            "grocery",
            "supermarket",
            "food",
            "market",
            # fashion
            "zara",
            "h&m",
            "reserved",
            "pull bear",
            "bershka",
            "stradivarius",
            "mango",
            "c&a",
            "new yorker",
            "primark",
            # online
            "emag",
            "amazon",
            "ebay",
            "fashion days",
            "answear",
            "about you",
            # electronics
            "altex",
            "media galaxy",
            "flanco",
            "pcgarage",
            "apple store",
            "orange shop",
            # furniture, DIY
            "ikea",
            "jysk",
            "dedeman",
            "leroy merlin",
            "praktiker",
            "shopping",
            "mall",
        ),
    ),
    CategoryRule(
        category_name="Locuință",
        description="Cheltuieli de utilități, chirii, rate imobiliare, renovări, mobilări",
        icon="🏠",
        keywords=(
            "chirie",
            "rent",
            "rata",
            "credit imobiliar",
            "ipoteca",
            "intretinere",
            "intretinere bloc",
            "administrare",
            "asociatie",
            # energy
            "enel",
            "electrica",
            "energie",
            "curent",
            "gaz",
            "engie",
            "distrigaz",
            # water
            "apa nova",
            "compania de apa",
            "canal",
            # internet, TV, phone
            "digi",
            "rds",
            "upc",
            "telekom",
            "vodafone",
            "orange",
            "internet",
            "cablu tv",
            "telefon",
            "mobil",
            # repairs
            "reparatie",
            "instalator",
            "electrician",
            "zugravi",
            "amenajari",
            "renovare",
            # international
            "electric",
            "electricity",
            "water",
            "utilities",
            "broadband",
            "housing",
            "maintenance",
        ),
    ),
    CategoryRule(
        category_name="Sănătate",
        description="Medicamente, investigații, consultații, intervenții medicale",
        icon="🏥",
        keywords=(
            # pharmacies
            "catena",
            "help net",
            "sensiblu",
            "farmacia tei",
            "dona",
            "pharmacy",
            "farmacie",
            "medicamente",
            # clinics
            "clinica",
            "spital",
            "medic",
            "doctor",
            "policlinica",
            "sanomed",
            "regina maria",
            "medicover",
            "medlife",
            "consultatie",
            "consult",
            "cabinet medical",
            # labs, imaging
            "synevo",
            "bioclinica",
            "analize",
            "laborator",
            "ecografie",
            "rmn",
            "ct",
            "radiografie",
            # dental
            "dentist",
            "stomatolog",
            "cabinet stomatologic",
            # international
            "hospital",
            "medical",
            "health",
        ),
    ),
    CategoryRule(
        category_name="Divertisment",
        description="Restaurante, cafenele, baruri, cinema, evenimente, ieșiri în oraș",
        icon="🍽️",
        keywords=(
            "restaurant",
            "pizzerie",
            "trattoria",
            "taverna",
            "bistro",
            "pub",
            "bar",
            "cafenea",
            "cafe",
            "coffee",
            "starbucks",
            "costa",
            "mccafe",
            "cinema",
            "cinematograf",
            "bilet film",
            "concert",
            "teatru",
            "eveniment",
            # fast food
            "mcdonald",
            "kfc",
            "burger king",
            "pizza hut",
            "subway",
            # international
            "dining",
            "nando",
            "greggs",
        ),
    ),
    CategoryRule(
        category_name="Subscripții",
        description="Abonamente pentru streaming, software, servicii cloud, fitness",
        icon="📺",
        keywords=(
            # streaming
            "netflix",
            "hbo",
            "disney",
            "amazon prime",
            "spotify",
            "apple music",
            "youtube premium",
            "deezer",
            "tidal",
            # software, cloud
            "adobe",
            "microsoft 365",
            "office 365",
            "google one",
            "icloud",
            "dropbox",
            "notion",
            "canva",
            "github",
            # gaming
            "playstation",
            "xbox",
            "steam",
            "epic games",
            # fitness
            "worldclass",
            "fitness",
            "gym",
            "subscription",
            "abonament",
            "membership",
        ),
    ),
    CategoryRule(
        category_name="Educație",
        description="Școală, universitate, cărți, cursuri online, training-uri",
        icon="📚",
        keywords=(
            "scoala",
            "universitate",
            "facultate",
            "curs",
            "training",
            "carte",
            "librarie",
            "carturesti",
            "humanitas",
            "udemy",
            "coursera",
            "skillshare",
            "educatie",
            "school",
            "education",
            "tuition",
            "books",
        ),
    ),
    CategoryRule(
        category_name="Venituri",
        description="Salarii, freelance, dividende, bonusuri, venituri din diverse surse",
        icon="💰",
        keywords=(
            "salariu",
            "salary",
            "venit",
            "income",
            "bonus",
            "premiu",
            "freelance",
            "dividende",
            "dobanda",
            "interest",
            "cashback",
            "rambursare",
            "refund",
        ),
    ),
    CategoryRule(
        category_name="Transfer Intern",
        description="Transferuri între propriile conturi (nu afectează bugetul total)",
        icon="🔄",
        keywords=(
            "transfer intern",
            "cont propriu",
            "între conturi",
            "from savings",
            "to savings",
            "internal transfer",
            # Revolut RU pockets
            "сбережения",
            "текущий",
            "накопления",
            "в кошелек",
            "из eur",
            "мгновенным доступом",
            "from сбережения",
        ),
    ),
    CategoryRule(
        category_name="Transferuri",
        description="Transferuri către/de la prieteni, familie sau servicii de transfer",
        icon="💸",
        keywords=(
            "money transfer",
            "payment from:",
            "payment to:",
            "to ina",
            "to vadim",
            "bizum",
            "перевод, получатель:",
            "получатель:",
        ),
    ),
    CategoryRule(
        category_name="Taxe și Impozite",
        description="Taxe, impozite, amenzi, penalități",
        icon="🧾",
        keywords=(
            "impozit",
            "tax",
            "tva",
            "anaf",
            "fisc",
            "taxa",
            "amenda",
            "penalitate",
            "fine",
            "penalty",
        ),
    ),
    CategoryRule(
        category_name="Cash",
        description="Retrageri de numerar de la ATM",
        icon="💵",
        keywords=(
            "atm",
            "cash",
            "retragere",
            "withdrawal",
            "bancomat",
            "numerar",
        ),
    ),
)

# Categories whose transactions are money in; everything else is an expense.
INCOME_CATEGORIES: frozenset[str] = frozenset({"Venituri"})


def category_type(name: str) -> str:
    return "income" if name in INCOME_CATEGORIES else "expense"


__all__ = [
    "CategoryRule",
    "CATEGORY_RULES",
    "INCOME_CATEGORIES",
    "category_type",
]

from __future__ import annotations

from typing import Dict, Optional

from bhaktimap.utils import clean_token


LANGUAGE = "language"
TRADITION = "tradition"


# Known misspellings, transliterations and variants -> display form.
# Keys are lower-cased. Every display form is also a key of its own
# table so canonical tokens normalize to themselves.
LANGUAGE_VARIANTS: Dict[str, str] = {
    # Bengali
    "bengali": "Bengali",
    "bangla": "Bengali",
    "bānglā": "Bengali",
    "bangala": "Bengali",
    # Braj
    "braj bhasha": "Braj Bhasha",
    "braj": "Braj Bhasha",
    "brij": "Braj Bhasha",
    "brajbhasha": "Braj Bhasha",
    "braj bhāṣā": "Braj Bhasha",
    "brajbhāṣā": "Braj Bhasha",
    # Awadhi
    "awadhi": "Awadhi",
    "avadhi": "Awadhi",
    "avadhī": "Awadhi",
    "awadhī": "Awadhi",
    # Hindi
    "hindi": "Hindi",
    "hindī": "Hindi",
    "old hindi": "Hindi",
    # Odia
    "odia": "Odia",
    "oriya": "Odia",
    "odiya": "Odia",
    "oṛiā": "Odia",
    # Kannada
    "kannada": "Kannada",
    "kannad": "Kannada",
    "kanarese": "Kannada",
    "kannaḍa": "Kannada",
    # Tamil
    "tamil": "Tamil",
    "tamizh": "Tamil",
    "tamiḻ": "Tamil",
    # Telugu
    "telugu": "Telugu",
    "telegu": "Telugu",
    # Marathi
    "marathi": "Marathi",
    "marāṭhī": "Marathi",
    "marāthī": "Marathi",
    # Punjabi
    "punjabi": "Punjabi",
    "panjabi": "Punjabi",
    "pañjābī": "Punjabi",
    "gurmukhi": "Punjabi",
    # Sanskrit
    "sanskrit": "Sanskrit",
    "samskrit": "Sanskrit",
    "samskrta": "Sanskrit",
    "saṃskṛta": "Sanskrit",
    "saṁskṛta": "Sanskrit",
    # Gujarati
    "gujarati": "Gujarati",
    "gujrati": "Gujarati",
    "gujarātī": "Gujarati",
    # Assamese
    "assamese": "Assamese",
    "asamiya": "Assamese",
    "axomiya": "Assamese",
    # Maithili
    "maithili": "Maithili",
    "maithilī": "Maithili",
    # Persian
    "persian": "Persian",
    "farsi": "Persian",
    # Sadhukkadi (sant vernacular)
    "sadhukkadi": "Sadhukkadi",
    "sadhukkari": "Sadhukkadi",
    "sadhukkaḍī": "Sadhukkadi",
    # Kashmiri
    "kashmiri": "Kashmiri",
    "kāshur": "Kashmiri",
    "koshur": "Kashmiri",
    # Malayalam
    "malayalam": "Malayalam",
    "malayāḷam": "Malayalam",
    # Rajasthani
    "rajasthani": "Rajasthani",
    "rājasthānī": "Rajasthani",
    "marwari": "Rajasthani",
}


TRADITION_VARIANTS: Dict[str, str] = {
    # Virashaiva / Lingayat
    "virashaiva": "Virashaiva",
    "vīraśaiva": "Virashaiva",
    "veerashaiva": "Virashaiva",
    "virasaiva": "Virashaiva",
    "lingayat": "Lingayat",
    "liṅgāyat": "Lingayat",
    "lingāyat": "Lingayat",
    "lingƒåyat": "Lingayat",
    "lingayata": "Lingayat",
    "liṅgāyata": "Lingayat",
    # Vaishnava
    "vaishnava": "Vaishnava",
    "vaisnava": "Vaishnava",
    "vaiṣṇava": "Vaishnava",
    "vaishnavism": "Vaishnava",
    "sri vaishnava": "Sri Vaishnava",
    "śrī vaiṣṇava": "Sri Vaishnava",
    "sri vaisnava": "Sri Vaishnava",
    "shri vaishnava": "Sri Vaishnava",
    "gaudiya vaishnava": "Gaudiya Vaishnava",
    "gauḍīya vaiṣṇava": "Gaudiya Vaishnava",
    "gaudiya vaisnava": "Gaudiya Vaishnava",
    # Shaiva
    "shaiva": "Shaiva",
    "śaiva": "Shaiva",
    "saiva": "Shaiva",
    "shaivism": "Shaiva",
    "shaiva siddhanta": "Shaiva Siddhanta",
    "śaiva siddhānta": "Shaiva Siddhanta",
    "saiva siddhanta": "Shaiva Siddhanta",
    "tamil shaiva bhakti": "Tamil Shaiva Bhakti",
    "tamil śaiva bhakti": "Tamil Shaiva Bhakti",
    "tamil saiva bhakti": "Tamil Shaiva Bhakti",
    # Shakta
    "shakta": "Shakta",
    "śākta": "Shakta",
    "sakta": "Shakta",
    # Sikh
    "sikh": "Sikh",
    "sikhism": "Sikh",
    "gurmat": "Sikh",
    # Sufi
    "sufi": "Sufi",
    "sufism": "Sufi",
    "ṣūfī": "Sufi",
    # Varkari
    "varkari": "Varkari",
    "vārkarī": "Varkari",
    "warkari": "Varkari",
    # Pushtimarg
    "pushtimarg": "Pushtimarg",
    "pushtimarga": "Pushtimarg",
    "pushti marg": "Pushtimarg",
    "puṣṭimārga": "Pushtimarg",
    # Ramanandi
    "ramanandi": "Ramanandi",
    "rāmānandī": "Ramanandi",
    # Alvar
    "alvar": "Alvar",
    "alwar": "Alvar",
    "azhwar": "Alvar",
    "āḻvār": "Alvar",
    "ālvār": "Alvar",
    # Nayanar
    "nayanar": "Nayanar",
    "nāyaṉār": "Nayanar",
    "nayanmar": "Nayanar",
    # Haridasa
    "haridasa": "Haridasa",
    "haridāsa": "Haridasa",
    # Mahanubhava
    "mahanubhava": "Mahanubhava",
    "mahānubhāva": "Mahanubhava",
    "mahanubhav": "Mahanubhava",
    # Kabir Panth
    "kabir panth": "Kabir Panth",
    "kabīr panth": "Kabir Panth",
    "kabirpanth": "Kabir Panth",
    # Sant Mat
    "sant mat": "Sant Mat",
    "nirguna sant": "Sant Mat",
    "nirguṇa sant": "Sant Mat",
}


_TABLES: Dict[str, Dict[str, str]] = {
    LANGUAGE: LANGUAGE_VARIANTS,
    TRADITION: TRADITION_VARIANTS,
}


def _title_words(token: str) -> str:
    # Only the first letter of each word changes; "McLeod" stays "McLeod".
    return " ".join(w[:1].upper() + w[1:] for w in token.split(" "))


def normalize(kind: str, raw_token: Optional[str]) -> Optional[str]:
    """
    Map one already-segmented token to its display form.
    Returns None for tokens shorter than 2 characters.
    """
    table = _TABLES.get(kind)
    if table is None:
        raise ValueError(f"Unknown vocabulary kind: {kind!r}")

    token = clean_token(raw_token)
    if len(token) < 2:
        return None

    hit = table.get(token.lower())
    if hit is not None:
        return hit
    return _title_words(token)

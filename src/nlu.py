"""Lightweight language detection and keyword extraction utilities."""

from __future__ import annotations

from typing import List

from scope_store import Language

# Function words, matched as whole words only
INDONESIAN_KEYWORDS = (
    "yang", "dan", "atau", "adalah", "untuk", "dari", "di", "ke", "pada", "dengan",
    "ini", "itu", "saya", "perusahaan", "produksi", "jasa", "kegiatan", "layanan",
    "bergerak", "bidang",
)

# Domain nouns, matched as substrings
INDONESIAN_WORDS = (
    "pertanian", "kehutanan", "perikanan", "konstruksi", "manufaktur", "perdagangan",
    "pendidikan", "kesehatan", "keuangan", "transportasi", "telekomunikasi", "perkebunan",
    "peternakan", "pengolahan", "pabrik", "restoran", "teknologi", "informasi",
    "kendaraan", "otomotif", "tekstil", "pakaian", "makanan", "minuman", "logam", "plastik",
    "kimia", "elektronik", "mesin", "peralatan", "furniture", "kayu", "kertas", "percetakan",
    "penerbitan", "bangunan", "properti", "semen", "beton", "baja", "aluminium",
    "pertambangan", "minyak", "gas", "listrik", "air", "limbah", "daur", "ulang", "hotel",
    "pariwisata", "komunikasi", "perbankan", "asuransi", "konsultan", "hukum", "akuntansi",
    "arsitektur", "desain", "penelitian", "pengembangan", "pemasaran", "periklanan",
    "rumah", "sakit", "klinik", "apotek", "laboratorium", "farmasi", "sekolah", "universitas",
    "pelatihan", "perpustakaan", "museum", "bioskop", "olahraga", "hiburan", "seni", "budaya",
    "kerajinan", "mainan",
    "sarana", "prasarana", "infrastruktur", "fasilitas", "pelayanan", "angkutan",
    "pengangkutan", "distribusi", "penyimpanan", "gudang", "pergudangan",
    "pengelolaan", "pemeliharaan", "perbaikan", "pembuatan", "perakitan", "penjualan",
    "pembelian", "ekspor", "impor",
    "industri", "usaha", "bisnis", "dagang", "niaga", "toko", "warung", "bengkel",
    "perbengkelan", "servis", "reparasi",
)

STOPWORDS = frozenset(
    (
        # Indonesian
        "yang", "dan", "atau", "adalah", "untuk", "dari", "di", "ke", "pada",
        "dengan", "ini", "itu", "saya", "bergerak", "menggunakan", "bahan",
        "membuat", "melakukan", "perusahaan",
        # English
        "the", "a", "an", "and", "or", "for", "of", "in", "to", "on", "with",
        "this", "that", "using", "by", "as", "at", "be", "we", "our", "my",
        "create", "make", "do", "have", "has", "company", "business",
    )
)

MIN_KEYWORD_LENGTH = 3


def _has_whole_word(normalized: str, word: str) -> bool:
    return (
        f" {word} " in normalized
        or normalized.startswith(f"{word} ")
        or normalized.endswith(f" {word}")
        or normalized == word
    )


def is_indonesian(text: str) -> bool:
    """Return True when the text looks Indonesian; English is the default."""
    normalized = text.lower()
    if any(_has_whole_word(normalized, keyword) for keyword in INDONESIAN_KEYWORDS):
        return True
    return any(word in normalized for word in INDONESIAN_WORDS)


def detect_language(text: str) -> Language:
    return Language.INDONESIAN if is_indonesian(text) else Language.ENGLISH


def extract_keywords(text: str) -> List[str]:
    """Split the query into search keywords.

    Tokens shorter than three characters and stopwords are dropped. When nothing
    survives, the whole normalized query is used as a single keyword so at least
    one search term is always tried.
    """
    normalized = text.lower().strip()
    keywords = [
        token
        for token in normalized.split()
        if len(token) >= MIN_KEYWORD_LENGTH and token not in STOPWORDS
    ]
    return keywords or [normalized]

"""Prompt templates and user-facing strings. Operating language is Indonesian."""

IMAGE_SENTINEL = "GAMBAR_MODE"

CLASSIFY_PROMPT = """
Kamu adalah asisten chat yang ramah.
Tugasmu:
- Jika pengguna meminta gambar atau foto, balas dengan satu kata saja: {sentinel}.
- Jika pengguna bertanya, balas dengan jawaban informatif & singkat.
Pesan pengguna: "{text}"
"""

REFINE_PROMPT = """
Tugas kamu hanya satu:
Ambil inti dari kalimat berikut dan ubah menjadi 1-3 kata kunci bahasa Inggris
yang cocok untuk pencarian gambar di Unsplash.
Jangan beri penjelasan, jangan gunakan bullet, jangan buat paragraf.
Kalimat: "{text}"
"""

# Longer alternatives first so "gambarin" is not left as "in"
FILLER_WORDS = (
    "tolong",
    "buatkan",
    "kirim",
    "gambarin",
    "gambar",
    "foto",
    "dong",
    "ya",
    "please",
)

RANDOM_QUERY = "random"

IMAGE_CAPTION = "🖼️ Hasil pencarian dari Unsplash untuk: *{query}*"
NO_IMAGE_TEXT = "⚠️ Maaf, tidak ditemukan gambar untuk: *{query}*"
APOLOGY_TEXT = "⚠️ Terjadi error saat menghubungi AI. Pastikan API Key valid dan model tersedia."

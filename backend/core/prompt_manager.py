"""
Language-keyed prompt templates with a fallback language.
"""
import logging
from pathlib import Path
from typing import Dict, Optional

from core.config import DEFAULT_LANGUAGE, PROMPTS_DIR

logger = logging.getLogger(__name__)


_ANALYSIS_JSON_SHAPE_EN = """{{
  "summary": "Comprehensive overview of the entire video content",
  "mainTopics": [
    {{
      "topic": "Specific topic or section name",
      "timestamp": "MM:SS",
      "description": "What is discussed or presented"
    }}
  ],
  "keyConcepts": [
    {{
      "concept": "Important term or idea",
      "definition": "Clear explanation of the concept"
    }}
  ],
  "timeline": [
    {{
      "time": "MM:SS",
      "event": "Specific event or discussion point"
    }}
  ]
}}"""

_ANALYSIS_JSON_SHAPE_MS = """{{
  "summary": "Gambaran keseluruhan kandungan video",
  "mainTopics": [
    {{
      "topic": "Nama topik atau bahagian tertentu",
      "timestamp": "MM:SS",
      "description": "Apa yang dibincangkan atau dipersembahkan"
    }}
  ],
  "keyConcepts": [
    {{
      "concept": "Istilah atau idea penting",
      "definition": "Penjelasan jelas tentang konsep"
    }}
  ],
  "timeline": [
    {{
      "time": "MM:SS",
      "event": "Peristiwa atau poin perbincangan tertentu"
    }}
  ]
}}"""


BUILTIN_TEMPLATES: Dict[str, Dict[str, str]] = {
    "en": {
        "analysis_system": """You are a precise video content analyzer. Your task is to:
1. Analyze the entire video from start to finish
2. Provide accurate timestamps for all major points
3. Ensure comprehensive coverage with no significant gaps
4. Return only valid JSON with no markdown or code blocks
5. Keep all timestamps in MM:SS or HH:MM:SS format
6. Ensure even distribution of topics throughout the video length""",
        "analysis_prompt": """Analyze this {duration} video titled "{title}".
The video contains {chunk_count} segments.

Create a comprehensive analysis that covers the ENTIRE video duration from start to finish.
Divide the video into logical sections and identify key moments, ensuring no major part is missed.

Requirements:
1. Identify a topic/event every 2-3 minutes
2. Cover the full video length from 0:00 to {duration}
3. Include both high-level topics and specific details
4. Note all major transitions between topics
5. Capture key concepts as they are introduced
6. Ensure timestamps are accurate and evenly distributed

Here's the full transcript:
{transcript}

Respond with ONLY a JSON object in this exact format (no markdown, no code blocks):
""" + _ANALYSIS_JSON_SHAPE_EN,
        "chat_system": """You are a helpful assistant that answers questions about YouTube videos.
Use the provided video analysis and relevant transcript sections.
Always reference specific timestamps when discussing parts of the video.
If the information isn't in the provided context, say so.
Format timestamps as [MM:SS] or [HH:MM:SS] for longer videos.
Keep responses focused and concise while being informative.""",
        "context_topics": "Relevant Topics:",
        "context_concepts": "Relevant Concepts:",
        "context_transcript": "Relevant transcript sections:",
        "context_question": "Question:",
        "fallback_summary": "{title} - {duration} video analysis",
        "fallback_section": "Section {number}",
        "fallback_concept": "Video Content",
        "fallback_definition": "Main content of the video",
    },
    "ms": {
        "analysis_system": """Anda adalah penganalisis kandungan video yang tepat. Tugas anda adalah untuk:
1. Menganalisis keseluruhan video dari awal hingga akhir
2. Berikan timestamp yang tepat untuk semua poin utama
3. Pastikan liputan menyeluruh tanpa jurang yang ketara
4. Kembalikan hanya JSON yang sah tanpa markdown atau blok kod
5. Simpan semua timestamp dalam format MM:SS atau HH:MM:SS
6. Pastikan topik-topik diedarkan secara seimbang sepanjang video""",
        "analysis_prompt": """Analisis video {duration} ini bertajuk "{title}".
Video ini mengandungi {chunk_count} segmen.

Buat analisis komprehensif yang merangkumi KESELURUHAN durasi video dari awal hingga akhir.
Bahagikan video kepada bahagian-bahagian yang logik dan kenalpasti saat-saat penting, pastikan tiada bahagian utama yang tertinggal.

Keperluan:
1. Kenalpasti topik/peristiwa setiap 2-3 minit
2. Liputi keseluruhan video dari 0:00 hingga {duration}
3. Sertakan topik tahap tinggi dan butiran khusus
4. Catat semua peralihan utama antara topik
5. Tangkap konsep utama semasa ia diperkenalkan
6. Pastikan timestamp tepat dan diagihkan secara seimbang

Berikut adalah transkrip lengkap:
{transcript}

Balas dengan HANYA objek JSON dalam format tepat ini (tanpa markdown, tanpa blok kod):
""" + _ANALYSIS_JSON_SHAPE_MS,
        "chat_system": """Anda adalah pembantu yang membantu menjawab soalan tentang video YouTube.
Gunakan analisis video dan bahagian transkrip yang disediakan.
Sentiasa rujuk timestamp tertentu apabila membincangkan bahagian video.
Jika maklumat tidak ada dalam konteks yang diberikan, nyatakan.
Format timestamp sebagai [MM:SS] atau [HH:MM:SS] untuk video yang lebih panjang.
Pastikan jawapan fokus dan ringkas sambil informatif.""",
        "context_topics": "Topik Berkaitan:",
        "context_concepts": "Konsep Penting:",
        "context_transcript": "Bahagian transkrip yang berkaitan:",
        "context_question": "Soalan:",
        "fallback_summary": "{title} - analisis video {duration}",
        "fallback_section": "Bahagian {number}",
        "fallback_concept": "Kandungan Video",
        "fallback_definition": "Kandungan utama video",
    },
}


class PromptManager:
    """Looks up prompt templates by language with a consistent fallback."""

    def __init__(
        self,
        templates: Optional[Dict[str, Dict[str, str]]] = None,
        default_language: str = DEFAULT_LANGUAGE,
        prompts_dir: Optional[Path] = PROMPTS_DIR,
    ):
        self.templates = templates if templates is not None else BUILTIN_TEMPLATES
        self.default_language = default_language
        self.prompts_dir = prompts_dir
        self.loaded_prompts: Dict[str, str] = {}

    def resolve_language(self, language: Optional[str]) -> str:
        """
        Map a caption language tag to a template language.

        Tries the exact tag, then its primary subtag ("ms-MY" -> "ms"),
        then the default language.
        """
        if language:
            tag = language.strip().lower().replace("_", "-")
            if tag in self.templates:
                return tag
            primary = tag.split("-")[0]
            if primary in self.templates:
                return primary
        return self.default_language

    def get_prompt(self, prompt_name: str, language: Optional[str] = None) -> str:
        """
        Load prompt by name for a language.

        A non-empty file at prompts/<lang>/<prompt_name>.txt overrides the
        built-in template.

        Raises:
            KeyError: if no template exists in the resolved or default language
        """
        lang = self.resolve_language(language)
        cache_key = f"{lang}/{prompt_name}"

        # Return cached if already loaded
        if cache_key in self.loaded_prompts:
            return self.loaded_prompts[cache_key]

        template = self._load_override(lang, prompt_name)
        if template is None:
            table = self.templates.get(lang, {})
            template = table.get(prompt_name)
            if template is None:
                template = self.templates.get(self.default_language, {}).get(prompt_name)
        if template is None:
            raise KeyError(f"No prompt template named {prompt_name!r} for language {lang!r}")

        self.loaded_prompts[cache_key] = template
        return template

    def _load_override(self, lang: str, prompt_name: str) -> Optional[str]:
        if self.prompts_dir is None:
            return None
        prompt_file = self.prompts_dir / lang / f"{prompt_name}.txt"
        if not prompt_file.exists():
            return None
        try:
            template = prompt_file.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to load prompt file %s: %s", prompt_file, e)
            return None
        if not template.strip():
            logger.warning("Prompt file is empty, using built-in template: %s", prompt_file)
            return None
        return template


# Global prompt manager instance
prompt_manager = PromptManager()

# /annotation_backend/services/prompt_library.py

"""
This file is the central, version-controlled library for the master prompts
used by the application's AI services. Prompts are treated as code and kept
here rather than inline in the services that send them.
"""

MT_QUALITY_ASSESSMENT_PROMPT = """
You are an expert translation quality reviewer. Your task is to assess the quality of a machine translation (MT) against its source sentence and return a structured JSON object.

**--- RULES ---**

1.  **SCORE THREE DIMENSIONS:** Give integer scores from 0 to 100 for `fluency_score` (how natural and grammatical the MT reads in {target_language}), `adequacy_score` (how much of the source meaning is preserved) and `overall_quality_score` (your holistic judgment).
2.  **CONFIDENCE:** Give a `confidence` between 0 and 1 describing how certain you are of the scores.
3.  **LIST ERRORS:** For every problem you find, add an object to `errors` with the keys "type" (one of: "mistranslation", "omission", "addition", "grammar", "terminology", "style", "punctuation", "untranslated", "other"), "severity" (one of: "minor", "major", "critical") and "description" (one short sentence).
4.  **SUGGESTIONS:** Put concrete improvement suggestions in `suggestions`, an array of strings. It may be empty.
5.  **EXPLANATION:** Summarize your judgment in `explanation`, at most three sentences.
6.  **NO ERRORS:** If the translation is flawless, return an empty `errors` array.
7.  **CRITICAL FORMATTING:** Your entire response must be ONLY the JSON object. Do not include any introductory text or wrap the JSON in markdown backticks like ```json ... ```.

**--- SENTENCE TO ASSESS ---**

*   **Source language:** {source_language}
*   **Target language:** {target_language}
*   **Domain:** {domain}
*   **Source text:**
    ---
    {source_text}
    ---
*   **Machine translation:**
    ---
    {machine_translation}
    ---

**--- REQUIRED OUTPUT (VALID JSON OBJECT ONLY) ---**
"""

from typing import Dict, Any
import json


def create_job_post_prompt(job_payload: Dict[str, Any]) -> str:
    """
    Creates the article rewriting prompt with the job record embedded as JSON.
    """

    job_json = json.dumps(job_payload, indent=2, ensure_ascii=False, default=str)

    prompt = f"""You are a professional job content writer and editor.

Your task:
Rewrite and professionally rephrase the provided job data into an ORIGINAL, human-written job post.
The final content must NOT copy wording, sentence structure, or phrasing from the source job board.
All text must be written in your own natural, professional wording while preserving the original meaning.

CRITICAL CONTENT RULES (must follow strictly):
- DO NOT copy sentences verbatim from the source.
- DO NOT closely mirror sentence structure or phrasing.
- Rewrite everything in clear, natural, human-like language.
- Ensure the content reads as manually written by a professional recruiter.
- Avoid repetitive, robotic phrasing.
- Maintain factual accuracy. Do NOT invent details.

STRUCTURE & OUTPUT RULES:
- Focus ONLY on the job post content.
- Do NOT include website header, footer, sidebar, search, comments, or related posts.
- Output ONLY a single <article> element.
- If a heading cannot be populated from the JSON, OMIT the heading AND its divider completely.
- Do NOT add sections like "About the Company" unless explicitly present in job data.
- Use <div class="divider">Shape</div> ONLY between valid sections.

ALLOWED SECTION ORDER (do not change):

1. <h1>Job Title - Company (Location)</h1>

2. Metadata block using <p> tags with <strong> labels (include only if data exists):
   - Company
   - Location
   - Salary
   - Job Type
   - Industry
   - Experience Required
   - Work Model

3. Divider

4. <h2>About the Role</h2>
   - Write a concise, engaging summary in ORIGINAL wording.

5. Divider

6. <h2>Key Responsibilities</h2>
   - Rewrite responsibilities using fresh sentence structure.
   - Use bullet points.
   - Use <h3> subheadings ONLY if responsibilities are clearly grouped.

7. Divider

8. <h2>Required Skills</h2>
   - List skills using rewritten, natural language.

9. Divider

10. <h2>Qualifications</h2>
    - Rephrase education and experience requirements clearly.

11. Divider

12. <h2>Key Traits</h2>
    - ONLY include if traits are explicitly mentioned in the job data.

13. Divider

14. <h2>Why Join [Company Name]</h2>
    - Rewrite benefits and reasons in an appealing, original tone.

15. Divider

16. <h2>How to Apply</h2>
    - Include apply link exactly as:
      <a href="URL" target="_blank" rel="noopener">Apply Now</a>

17. Divider

18. <h2>SEO Meta Details</h2>
    - <p><strong>Meta Title:</strong> Write an original SEO-friendly title</p>
    - <p><strong>Meta Description:</strong> Write a natural, human-sounding meta description</p>

STYLE RULES:
- Professional, recruiter-style tone
- Short, clear paragraphs
- Bullet points where appropriate
- No filler phrases
- No placeholders like "Not provided"
- Escape HTML properly

Return ONLY valid HTML.

JSON INPUT:
{job_json}
"""
    return prompt

TRANSCRIBE_PROMPT = """You are an OCR engine for CVs and resumes.

Transcribe ALL readable text from the attached document, top to bottom.

Rules:
- Keep one line of output per visual line of the document.
- Keep names, emails, phone numbers and URLs exactly as written.
- Do not summarize, translate, correct or comment.
- Output ONLY the transcribed plain text, without markdown."""


EXTRACT_SYSTEM_PROMPT = """You are a CV parser. You receive a CV document and must extract the candidate's contact details and skills.

RULES:
1. name: the candidate's full name as written at the top of the CV. Empty string if absent.
2. email / phone: exactly as written. Empty string if absent.
3. links: LinkedIn, GitHub, portfolio and other professional URLs.
4. skills: REAL technical and professional skills only (languages, frameworks, tools, platforms, methodologies, soft skills).
5. Never invent data that is not in the document.

Always answer by calling the extract_cv_data function."""

EXTRACT_USER_PROMPT = "Extract the candidate information from this CV."

EXTRACT_TOOL = {
    "type": "function",
    "function": {
        "name": "extract_cv_data",
        "description": "Extract CV information",
        "parameters": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "email": {"type": "string"},
                "phone": {"type": "string"},
                "links": {"type": "array", "items": {"type": "string"}},
                "skills": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["name", "email", "phone", "links", "skills"],
            "additionalProperties": False,
        },
    },
}


JOB_CATEGORIES = [
    "HR", "Designer", "Information Technology", "Teacher", "Advocate",
    "Business Development", "Healthcare", "Fitness", "Agriculture", "BPO",
    "Sales", "Consultant", "Digital Media", "Automobile", "Chef",
    "Finance", "Apparel", "Engineering", "Accountant", "Construction",
    "Public Relations", "Banking", "Arts", "Aviation",
]

# Characters of CV text sent for categorization.
CATEGORIZE_MAX_CHARS = 3000

CATEGORIZE_SYSTEM_PROMPT = f"""You are an expert CV categorization system. Analyze the CV and classify it into ONE of these {len(JOB_CATEGORIES)} job categories:
{", ".join(JOB_CATEGORIES)}

Consider:
- Job titles and roles mentioned
- Skills and expertise
- Work experience domain
- Education background
- Industry keywords

Provide a confidence score (0-100) and brief reasoning for your classification."""

CATEGORIZE_USER_TEMPLATE = """Categorize this CV:

{cv_text}"""

CATEGORIZE_TOOL = {
    "type": "function",
    "function": {
        "name": "categorize_cv",
        "description": "Categorize a CV into a job category",
        "parameters": {
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "enum": JOB_CATEGORIES,
                    "description": "The job category that best matches this CV",
                },
                "confidence": {
                    "type": "number",
                    "minimum": 0,
                    "maximum": 100,
                    "description": "Confidence score for this categorization (0-100)",
                },
                "reasoning": {
                    "type": "string",
                    "description": "Brief explanation for why this category was chosen",
                },
            },
            "required": ["category", "confidence", "reasoning"],
            "additionalProperties": False,
        },
    },
}

"""Extraction prompts for insurance certificates and contracts.

One system prompt per document kind, plus a user prompt with a slot for the
PDF text (text mode) or no slot (vision mode, the image travels as a
separate message part). Dates on US certificates are read as MM/DD/YYYY;
anything ambiguous must come back as null.
"""

INSURANCE_SYSTEM_PROMPT = (
    "You are an expert insurance document parser that ONLY extracts data that is "
    "clearly visible in the document. You NEVER make up, infer, or guess information. "
    "If data is not clearly visible, you return null for that field."
)

CONTRACT_SYSTEM_PROMPT = (
    "You are an expert contract document parser that ONLY extracts data that is "
    "clearly visible in the document. You NEVER make up, infer, or guess information. "
    "If data is not clearly visible, you return null for that field."
)

_RULES = """CRITICAL RULES:
1. ONLY extract data that you can clearly see in the {source}
2. If a field is not visible, not readable, or unclear, set it to null
3. DO NOT infer or calculate any dates
4. Use the EXACT dates shown in the {source}
5. Convert dates to YYYY-MM-DD format ONLY if you can clearly read them
6. If date format is ambiguous, use null"""

_DATE_RULES = """IMPORTANT FOR DATES:
- Look for dates near {keywords}
- Dates on these documents are written MM/DD/YYYY (US format)
- Convert to YYYY-MM-DD format: "01/15/2026" becomes "2026-01-15"
- If date is unclear or not readable, use null"""

INSURANCE_SCHEMA = """{
  "expirationDate": "YYYY-MM-DD of the EARLIEST clearly visible policy expiration date, or null if not found",
  "policies": [
    {
      "type": "EXACT name of policy type as shown (e.g., COMMERCIAL GENERAL LIABILITY, WORKERS COMPENSATION), or null",
      "coverageLimit": "Numeric value of coverage limit without $ or commas, or null if not visible",
      "expiryDate": "YYYY-MM-DD expiration date EXACTLY as shown, or null if not found",
      "carrier": "Insurance carrier company name EXACTLY as shown, or null if not visible",
      "policyNumber": "Policy number EXACTLY as shown, or null if not visible"
    }
  ],
  "insuredName": "Name of insured party EXACTLY as shown, or null",
  "certificateHolder": "Certificate holder name EXACTLY as shown, or null"
}"""

CONTRACT_SCHEMA = """{
  "contractType": "Type of contract (e.g., Service Agreement, NDA, Purchase Order, MSA) or null if not found",
  "startDate": "YYYY-MM-DD contract effective/start date, or null if not found",
  "endDate": "YYYY-MM-DD contract expiration/end date, or null if not found",
  "value": "Numeric value of contract without $ or commas (e.g., 50000 for $50,000), or null if not visible",
  "autoRenewal": "true or false if an auto-renewal clause is clearly present or absent, otherwise null",
  "parties": [
    {
      "name": "Name of party/organization EXACTLY as shown",
      "role": "Role (e.g., Client, Vendor, Service Provider), or null"
    }
  ],
  "description": "Brief summary of contract purpose/scope in 1-2 sentences, or null if unclear"
}"""

_INSURANCE_GUIDANCE = """IMPORTANT FOR POLICY TYPES:
- Use EXACT wording: "COMMERCIAL GENERAL LIABILITY", "AUTOMOBILE LIABILITY", "WORKERS COMPENSATION", "UMBRELLA LIAB", etc.
- Do not rename or standardize them

IMPORTANT FOR COVERAGE LIMITS:
- Look for numbers near "EACH OCCURRENCE", "AGGREGATE", "COMBINED SINGLE LIMIT"
- Extract only the number (e.g., "$1,000,000" becomes 1000000)
- If multiple limits exist, use the primary/occurrence limit
- If unclear, use null"""

_CONTRACT_GUIDANCE = """IMPORTANT FOR CONTRACT TYPES:
- Common types: "Service Agreement", "Master Service Agreement", "Non-Disclosure Agreement", "Purchase Order", "Consulting Agreement", "Maintenance Contract", "Software License"

IMPORTANT FOR CONTRACT VALUE:
- Look for "TOTAL", "CONTRACT VALUE", "AMOUNT", "PAYMENT" sections
- Extract only the number (e.g., "$50,000.00" becomes 50000)
- If unclear or variable pricing, use null

IMPORTANT FOR AUTO-RENEWAL:
- Look for: "auto-renew", "automatic renewal", "evergreen", "shall renew automatically"

IMPORTANT FOR PARTIES:
- Usually under "PARTIES", "BETWEEN" or "THIS AGREEMENT IS MADE BETWEEN" headings"""

_EMPTY_INSURANCE = '{"expirationDate": null, "policies": [], "insuredName": null, "certificateHolder": null}'
_EMPTY_CONTRACT = (
    '{"contractType": null, "startDate": null, "endDate": null, "value": null, '
    '"autoRenewal": null, "parties": [], "description": null}'
)


def _build(
    *, subject: str, source: str, keywords: str, schema: str, guidance: str,
    empty: str, text: str | None,
) -> str:
    parts = [
        f"You are extracting information from {subject}. "
        f"You MUST only extract information that is clearly present in the {source}. "
        "DO NOT make up, guess, or infer any information.",
        _RULES.format(source=source),
        f"Return a JSON object with this EXACT structure:\n\n{schema}",
        _DATE_RULES.format(keywords=keywords),
        guidance,
    ]
    if text is not None:
        parts.append(f"PDF TEXT CONTENT:\n{text}")
    parts.append(
        "Return ONLY valid JSON. If the document does not match or data cannot be "
        f"extracted, return:\n{empty}"
    )
    return "\n\n".join(parts)


def insurance_prompt(text: str | None = None) -> str:
    """User prompt for a Certificate of Insurance; *text* is None in vision mode."""
    return _build(
        subject="a Certificate of Insurance (COI)" + (" text" if text is not None else " image"),
        source="text" if text is not None else "image",
        keywords='"POLICY EXP", "EXPIRATION", "EXP DATE"',
        schema=INSURANCE_SCHEMA,
        guidance=_INSURANCE_GUIDANCE,
        empty=_EMPTY_INSURANCE,
        text=text,
    )


def contract_prompt(text: str | None = None) -> str:
    """User prompt for a contract; *text* is None in vision mode."""
    return _build(
        subject="a CONTRACT document" + (" text" if text is not None else " image"),
        source="text" if text is not None else "image",
        keywords='"EFFECTIVE DATE", "START DATE", "EXECUTION DATE", "EXPIRATION", "TERM"',
        schema=CONTRACT_SCHEMA,
        guidance=_CONTRACT_GUIDANCE,
        empty=_EMPTY_CONTRACT,
        text=text,
    )

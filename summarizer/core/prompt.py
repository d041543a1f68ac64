SUMMARY_PROMPT = (
    "Generate a brief, friendly summary of this student: "
    "Name: {name}, Age: {age}, Email: {email}. "
    "Keep it under {word_limit} words. "
    "Don't include any other text like 'Here is the summary' or "
    "'Here is the student' or 'Here is the student summary'. "
    "Just the summary."
)

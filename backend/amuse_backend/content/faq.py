"""Keyword matcher behind the floating FAQ assistant."""

FALLBACK_ANSWER = (
    "I don't have a specific answer to that question. For detailed assistance, "
    "I'd recommend contacting our team directly through the contact form or by phone."
)
MIN_WORD_LENGTH = 4
MIN_MATCHES = 2


def count_matches(question, faq_question, faq_answer):
    """Input words longer than three characters that appear inside some FAQ word."""
    faq_words = faq_question.lower().split(" ") + faq_answer.lower().split(" ")
    return sum(
        1 for word in question.lower().split(" ")
        if len(word) >= MIN_WORD_LENGTH and any(word in faq_word for faq_word in faq_words)
    )


def find_best_match(question, faqs):
    """
    First FAQ, in the given order, sharing at least two keywords with the
    question. `faqs` yields objects with `question` and `answer`.
    """
    for faq in faqs:
        if count_matches(question, faq.question, faq.answer) >= MIN_MATCHES:
            return faq
    return None

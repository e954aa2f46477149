from typing import List

from pdfmind.models.quiz import QuizQuestion

# Banque locale utilisée quand aucun fournisseur ne répond.
QUESTION_BANK: List[QuizQuestion] = [
    QuizQuestion(
        id="1",
        question="What is the main topic discussed in this document?",
        options=["Technology and Innovation", "Business Strategy", "Educational Methods", "Scientific Research"],
        correctAnswer=0,
        difficulty="easy",
        explanation="This question tests your understanding of the document's primary focus.",
    ),
    QuizQuestion(
        id="2",
        question="Which of the following concepts is most important according to the text?",
        options=["Efficiency", "Creativity", "Accuracy", "Speed"],
        correctAnswer=1,
        difficulty="intermediate",
        explanation="The document emphasizes creative thinking and innovative approaches.",
    ),
    QuizQuestion(
        id="3",
        question="What would be the best approach to implement the ideas from this document?",
        options=[
            "Immediate implementation without testing",
            "Gradual rollout with feedback loops",
            "Complete overhaul of existing systems",
            "Outsourcing to external consultants",
        ],
        correctAnswer=1,
        difficulty="advanced",
        explanation="Gradual implementation allows for learning and adaptation based on real-world feedback.",
    ),
    QuizQuestion(
        id="4",
        question="How does this document relate to current industry trends?",
        options=[
            "It contradicts modern practices",
            "It aligns with emerging technologies",
            "It focuses on outdated methods",
            "It ignores current developments",
        ],
        correctAnswer=1,
        difficulty="logical",
        explanation="The document demonstrates forward-thinking approaches that align with current industry evolution.",
    ),
    QuizQuestion(
        id="5",
        question="What is the expected outcome of following the document's recommendations?",
        options=[
            "Increased costs and complexity",
            "Improved efficiency and innovation",
            "Reduced workforce requirements",
            "Maintenance of status quo",
        ],
        correctAnswer=1,
        difficulty="mathematical",
        explanation="The recommendations are designed to optimize processes and foster innovation.",
    ),
    QuizQuestion(
        id="6",
        question="Based on the document's length and detail, what level of expertise is required?",
        options=["Beginner level", "Intermediate level", "Advanced level", "Expert level"],
        correctAnswer=2,
        difficulty="advanced",
        explanation="The comprehensive nature of the document suggests it requires advanced understanding.",
    ),
    QuizQuestion(
        id="7",
        question="What key challenges are addressed in this document?",
        options=[
            "Only technical challenges",
            "Only financial challenges",
            "Both technical and strategic challenges",
            "No specific challenges mentioned",
        ],
        correctAnswer=2,
        difficulty="intermediate",
        explanation="The document appears to address multiple types of challenges comprehensively.",
    ),
    QuizQuestion(
        id="8",
        question="How should stakeholders be involved in the implementation process?",
        options=[
            "Minimal involvement required",
            "Active participation and feedback",
            "Only final approval needed",
            "No stakeholder involvement",
        ],
        correctAnswer=1,
        difficulty="logical",
        explanation="Successful implementation typically requires stakeholder engagement and feedback.",
    ),
    QuizQuestion(
        id="9",
        question="What is the timeline for implementing the document's recommendations?",
        options=[
            "Immediate (within days)",
            "Short-term (within months)",
            "Medium-term (6-12 months)",
            "Long-term (1+ years)",
        ],
        correctAnswer=2,
        difficulty="mathematical",
        explanation="Complex implementations typically require medium-term planning and execution.",
    ),
    QuizQuestion(
        id="10",
        question="What resources are needed for successful implementation?",
        options=["Only financial resources", "Only human resources", "Multiple resource types", "No additional resources"],
        correctAnswer=2,
        difficulty="advanced",
        explanation="Successful implementation typically requires various types of resources.",
    ),
]


def local_quiz(count: int) -> List[QuizQuestion]:
    """
    Retourne `count` questions de la banque.
    Au-delà de la taille de la banque, on recycle les questions dans l'ordre
    en suffixant id et énoncé par le numéro de variante.
    """
    size = len(QUESTION_BANK)
    if count <= size:
        return QUESTION_BANK[:count]

    out = list(QUESTION_BANK)
    for i in range(size, count):
        base = QUESTION_BANK[i % size]
        variant = i // size + 1
        out.append(
            base.model_copy(
                update={
                    "id": f"{base.id}-{variant}",
                    "question": f"{base.question} (variant {variant})",
                }
            )
        )
    return out

# 테스트 공용 문항 fixture (dict 형태 그대로 Exam.questions 에 저장)

MCQ_QUESTION = {
    "id": 1,
    "type": "multiple_choice",
    "question": "Which HTTP status means 'Not Found'?",
    "options": ["200", "404", "500"],
    "correct_answer": 1,
    "points": 1,
    "explanation": "404 is Not Found.",
}

OPEN_QUESTION = {
    "id": 2,
    "type": "short_answer",
    "question": "Describe database indexing.",
    "points": 2,
    "expected_keywords": ["b-tree", "lookup"],
}

CODE_QUESTION = {
    "id": 3,
    "type": "code",
    "question": "Reverse a string.",
    "points": 3,
    "language": "python",
    "starter_code": "def reverse(s):\n    pass\n",
    "test_cases": [{"input": "ab", "output": "ba"}],
}

"""Core question/SVG generation pipeline.

Modules:
- question: Question data model and answer-choice helpers
- teks: TEKS catalog, STAAR counts and category distributions
- visual_detector: Keyword classifier for questions that need a diagram
- svg_diagrams: String-built SVG diagram catalog
- visual_generator: Diagram selection and data extraction for question text
- template_generator: Efficient template questions
- diverse_generator: Scenario questions across many question types
- authentic_bank / authentic_generator: Authentic-pattern STAAR items
- quality_control: Validation scores and the review queue
- model_manager: Simulated world-class model ensemble
- generation_service: Priority-based generation entry point
- exam_generator: Full-length mock exams
- progress: StarPower rewards and accuracy summaries
"""

__all__ = [
    "question",
    "teks",
    "visual_detector",
    "svg_diagrams",
    "visual_generator",
    "template_generator",
    "diverse_generator",
    "authentic_bank",
    "authentic_generator",
    "quality_control",
    "model_manager",
    "generation_service",
    "exam_generator",
    "progress",
]

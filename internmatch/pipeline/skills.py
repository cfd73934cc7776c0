"""Skill name suggestions for profile and posting forms."""

SKILL_CATALOG: tuple[str, ...] = (
    "Python", "JavaScript", "Java", "C++", "React", "Node.js", "Angular", "Vue.js",
    "Machine Learning", "Data Science", "Artificial Intelligence", "Deep Learning",
    "SQL", "MongoDB", "PostgreSQL", "MySQL", "Redis", "Docker", "Kubernetes",
    "AWS", "Azure", "Google Cloud", "Git", "HTML", "CSS", "TypeScript",
    "Spring Boot", "Django", "Flask", "Express.js", "REST API", "GraphQL",
    "TensorFlow", "PyTorch", "Pandas", "NumPy", "Scikit-learn", "OpenCV",
    "Unity", "Unreal Engine", "Android", "iOS", "React Native", "Flutter",
    "Blockchain", "Ethereum", "Solidity", "DevOps", "CI/CD", "Jenkins",
    "Figma", "Adobe Photoshop", "Adobe Illustrator", "UI/UX Design",
    "Digital Marketing", "SEO", "SEM", "Social Media Marketing", "Content Writing",
)


def suggest_skills(query: str = "", limit: int = 10) -> list[str]:
    """Return catalog skills containing query (case-insensitive), in catalog order."""
    needle = query.lower().strip()
    matches = [skill for skill in SKILL_CATALOG if needle in skill.lower()]
    return matches[: max(limit, 0)]

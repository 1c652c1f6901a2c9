"""Professor record model joined from the ratings and comments datasets."""

from pydantic import BaseModel, Field


class ProfessorRecord(BaseModel):
    """A single professor, keyed by trimmed name.

    Attributes:
        name: Trimmed, case-sensitive professor name (unique key)
        rating: Overall rating 0.0-4.0 (0 when missing or unparseable)
        num_evals: Number of evaluations (0 when missing or unparseable)
        clarity: Material-clarity score
        helpfulness: Student-difficulties score
        department: Department name (may be empty)
        courses: Courses taught (may be empty)
        link: Permalink on the ratings site
        comments: Review texts joined with " | " and length-bounded
        grade_levels: Non-"N/A" grade-level tags from reviews
        grades: Non-"N/A" grade tags from reviews
    """

    name: str
    rating: float = 0.0
    num_evals: int = Field(default=0, ge=0)
    clarity: float = 0.0
    helpfulness: float = 0.0
    department: str = ""
    courses: str = ""
    link: str
    comments: str = ""
    grade_levels: list[str] = Field(default_factory=list)
    grades: list[str] = Field(default_factory=list)

    def has_sufficient_data(self) -> bool:
        """Check whether there is enough review data to ask for a summary.

        Returns:
            True if the record has at least one evaluation and non-empty comments
        """
        return self.num_evals > 0 and bool(self.comments)

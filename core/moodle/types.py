"""Structured course model reconstructed from LMS pages."""

from dataclasses import dataclass, field


@dataclass
class Activity:
    """A single piece of course content a learner can open."""

    id: str  # course-module id; "" when the page gives none
    name: str
    mod_type: str
    url: str
    icon: str = ""

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "modType": self.mod_type,
            "url": self.url,
        }
        if self.icon:
            data["icon"] = self.icon
        return data


@dataclass
class Section:
    """A course section (week/topic/lesson) and its activities.

    url is only known for sections discovered as links to their own page.
    """

    name: str
    activities: list[Activity] = field(default_factory=list)
    url: str | None = None

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "activities": [a.to_dict() for a in self.activities],
        }
        if self.url:
            data["url"] = self.url
        return data


@dataclass
class Course:
    """An enrolled course as listed on the dashboard."""

    id: int
    fullname: str
    shortname: str
    url: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fullname": self.fullname,
            "shortname": self.shortname,
            "url": self.url,
        }


@dataclass
class CourseFull:
    """Full section/activity tree of one course."""

    course_id: int | str
    tabs: list[str]
    intro: Section
    sections: list[Section]

    @property
    def total_sections(self) -> int:
        return len(self.sections)

    @property
    def total_activities(self) -> int:
        return sum(len(s.activities) for s in self.sections)

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_id,
            "tabs": self.tabs,
            "intro": self.intro.to_dict(),
            "sections": [s.to_dict() for s in self.sections],
            "totalSections": self.total_sections,
            "totalActivities": self.total_activities,
        }

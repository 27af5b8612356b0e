"""
Task recommendations for volunteers.

A task is recommended when one of the volunteer's skills appears inside the
task's required-skills text, or when the task is emergency response work and
the volunteer has medical training.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .models import VolunteerProfile, VolunteerTask

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5


class MatchReason(Enum):
    """Why a task was recommended."""
    SKILL = "skill"  # A listed skill appears in the task's required skills
    MEDICAL_TRAINING = "medical_training"  # Emergency response + medical training


@dataclass
class TaskMatch:
    """A recommended task and why it matched."""
    task: VolunteerTask
    reason: MatchReason
    matched_skills: list = field(default_factory=list)


class TaskRecommender:
    """
    Recommends open tasks to a volunteer.

    Matching is a case-insensitive substring test of each skill against the
    task's free-text required skills.
    """

    def __init__(self, limit: int = MAX_RECOMMENDATIONS):
        self.limit = limit

    def match(self, profile: VolunteerProfile, task: VolunteerTask) -> Optional[TaskMatch]:
        required = (task.required_skills or '').lower()
        matched = [skill for skill in profile.skill_list if skill in required]
        if matched:
            return TaskMatch(task=task, reason=MatchReason.SKILL, matched_skills=matched)

        if (task.category == VolunteerTask.CATEGORY_EMERGENCY_RESPONSE
                and profile.has_medical_training):
            return TaskMatch(task=task, reason=MatchReason.MEDICAL_TRAINING)

        return None

    def recommend(self, profile: Optional[VolunteerProfile]) -> list:
        """
        Return up to ``limit`` TaskMatch objects for open tasks, soonest first.

        Args:
            profile: Volunteer to recommend for; None yields no recommendations.
        """
        if profile is None:
            return []

        matches = []
        open_tasks = VolunteerTask.objects.filter(status=VolunteerTask.STATUS_OPEN).order_by('start_date', 'id')
        for task in open_tasks:
            match = self.match(profile, task)
            if match:
                matches.append(match)
                if len(matches) >= self.limit:
                    break

        logger.debug(f"Recommended {len(matches)} task(s) for volunteer {profile.pk}")
        return matches


def recommended_tasks(profile, limit: int = MAX_RECOMMENDATIONS) -> list:
    """Just the tasks from TaskRecommender.recommend."""
    return [match.task for match in TaskRecommender(limit).recommend(profile)]

"""Seed the database with a demo owner, workspace and scored quiz."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json

from surveyforge.config import settings
from surveyforge.database import Database
from surveyforge.models.survey import Outcome, Question, QuestionOption, Survey
from surveyforge.models.user import User
from surveyforge.models.workspace import Workspace
from surveyforge.utils import lead_capture


def seed():
    database = Database(settings.DATABASE_URL)
    database.create_all()
    db = database.session()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        owner = User(email="demo@example.com", name="Demo Owner")
        db.add(owner)
        db.flush()

        workspace = Workspace(owner_id=owner.user_id, name="My workspace", description="Initial workspace", is_default=True)
        db.add(workspace)
        db.flush()

        survey = Survey(
            owner_id=owner.user_id,
            workspace_id=workspace.workspace_id,
            title="Are you ready to automate?",
            description="Five quick questions about your team's workflow.",
            is_active=True,
            lead_capture_fields_json=json.dumps(lead_capture.default_fields(), ensure_ascii=False),
        )
        questions = [
            ("How many manual reports do you build each week?", "single_choice",
             [("None", 0), ("1-3", 1), ("4-10", 2), ("More than 10", 3)]),
            ("Which tools does your team already use?", "checkboxes",
             [("Spreadsheets", 1), ("A CRM", 1), ("Workflow automation", 2), ("Custom scripts", 2)]),
            ("How comfortable is the team with change?", "linear_scale",
             [(str(idx), 1 if idx > 5 else 0) for idx in range(1, 11)]),
            ("Anything else we should know?", "paragraph", []),
        ]
        for order, (text, question_type, options) in enumerate(questions, start=1):
            survey.questions.append(
                Question(
                    text=text,
                    question_type=question_type,
                    display_order=order,
                    options=[QuestionOption(text=label, score=score) for label, score in options],
                )
            )
        survey.outcomes.extend(
            [
                Outcome(title="Getting started", description="Start by mapping one repetitive task.", min_score=0, max_score=3),
                Outcome(title="Ready to scale", description="You have the basics; connect your tools.", min_score=4, max_score=7),
                Outcome(title="Automation pro", description="Time to build end-to-end workflows.", min_score=8, max_score=None),
            ]
        )
        db.add(survey)
        db.commit()

        print("Seed data created successfully!")
        print(f"  Owner login: {owner.email}")
        print(f"  Survey: {survey.title} -> {settings.embed_url(survey.survey_id)}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    seed()

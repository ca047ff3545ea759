"""Initial annotation schema

Revision ID: 3f1a9c2d7e40
Revises:
Create Date: 2025-03-02 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, sentences, annotations, evaluations, MT assessments and the onboarding tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('is_evaluator', sa.Boolean(), nullable=False),
        sa.Column('languages', sa.JSON(), nullable=False),
        sa.Column('preferred_language', sa.String(), nullable=True),
        sa.Column('proficiency_levels', sa.JSON(), nullable=False),
        sa.Column('skip_onboarding', sa.Boolean(), nullable=False),
        sa.Column('onboarding_completed', sa.Boolean(), nullable=False),
        sa.Column('guidelines_seen', sa.Boolean(), nullable=False),
        sa.Column('deactivation_reason', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'sentences',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('source_text', sa.Text(), nullable=False),
        sa.Column('machine_translation', sa.Text(), nullable=True),
        sa.Column('source_language', sa.String(), nullable=False),
        sa.Column('target_language', sa.String(), nullable=False),
        sa.Column('domain', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_sentences_id', 'sentences', ['id'])
    op.create_index('ix_sentences_source_language', 'sentences', ['source_language'])
    op.create_index('ix_sentences_target_language', 'sentences', ['target_language'])
    op.create_index('ix_sentences_is_active', 'sentences', ['is_active'])
    op.create_index('ix_sentences_language_pair', 'sentences', ['source_language', 'target_language'])

    op.create_table(
        'annotations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('annotator_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('sentence_id', sa.Integer(), sa.ForeignKey('sentences.id'), nullable=False),
        sa.Column('final_translation', sa.Text(), nullable=False),
        sa.Column('fluency_score', sa.Integer(), nullable=True),
        sa.Column('adequacy_score', sa.Integer(), nullable=True),
        sa.Column('overall_quality', sa.Integer(), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('time_spent_seconds', sa.Integer(), nullable=True),
        sa.Column('voice_recording_url', sa.String(), nullable=True),
        sa.Column('voice_recording_duration', sa.Float(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
    )
    op.create_index('ix_annotations_id', 'annotations', ['id'])
    op.create_index('ix_annotations_annotator_id', 'annotations', ['annotator_id'])
    op.create_index('ix_annotations_sentence_id', 'annotations', ['sentence_id'])
    op.create_index('ix_annotations_status', 'annotations', ['status'])
    # One live annotation per (annotator, sentence); soft-deleted rows don't count.
    op.create_index(
        'uq_annotations_active_annotator_sentence',
        'annotations',
        ['annotator_id', 'sentence_id'],
        unique=True,
        sqlite_where=sa.text("status != 'deleted'"),
        postgresql_where=sa.text("status != 'deleted'"),
    )

    op.create_table(
        'evaluations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('annotation_id', sa.Integer(), sa.ForeignKey('annotations.id'), nullable=False),
        sa.Column('evaluator_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('accuracy_score', sa.Integer(), nullable=True),
        sa.Column('fluency_score', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('time_spent_seconds', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('evaluator_id', 'annotation_id', name='uq_evaluations_evaluator_annotation'),
    )
    op.create_index('ix_evaluations_id', 'evaluations', ['id'])
    op.create_index('ix_evaluations_annotation_id', 'evaluations', ['annotation_id'])
    op.create_index('ix_evaluations_evaluator_id', 'evaluations', ['evaluator_id'])

    op.create_table(
        'mt_quality_assessments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sentence_id', sa.Integer(), sa.ForeignKey('sentences.id'), nullable=False),
        sa.Column('requested_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('fluency_score', sa.Float(), nullable=True),
        sa.Column('adequacy_score', sa.Float(), nullable=True),
        sa.Column('overall_quality_score', sa.Float(), nullable=True),
        sa.Column('confidence', sa.Float(), nullable=True),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('errors', sa.JSON(), nullable=False),
        sa.Column('suggestions', sa.JSON(), nullable=False),
        sa.Column('model_name', sa.String(), nullable=True),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('assessed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('human_score', sa.Float(), nullable=True),
        sa.Column('human_feedback', sa.Text(), nullable=True),
        sa.Column('reviewed_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_mt_quality_assessments_id', 'mt_quality_assessments', ['id'])
    op.create_index('ix_mt_quality_assessments_sentence_id', 'mt_quality_assessments', ['sentence_id'], unique=True)
    op.create_index('ix_mt_quality_assessments_requested_by_id', 'mt_quality_assessments', ['requested_by_id'])
    op.create_index('ix_mt_quality_assessments_status', 'mt_quality_assessments', ['status'])
    op.create_index('ix_mt_quality_assessments_reviewed_by_id', 'mt_quality_assessments', ['reviewed_by_id'])

    op.create_table(
        'language_proficiency_questions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('language', sa.String(), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_answer', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('difficulty', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_language_proficiency_questions_id', 'language_proficiency_questions', ['id'])
    op.create_index('ix_language_proficiency_questions_language', 'language_proficiency_questions', ['language'])

    op.create_table(
        'onboarding_tests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('language', sa.String(), nullable=False),
        sa.Column('session_id', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('question_ids', sa.JSON(), nullable=False),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('passed', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('user_id', 'session_id', 'language', name='uq_onboarding_tests_user_session_language'),
    )
    op.create_index('ix_onboarding_tests_id', 'onboarding_tests', ['id'])
    op.create_index('ix_onboarding_tests_user_id', 'onboarding_tests', ['user_id'])
    op.create_index('ix_onboarding_tests_language', 'onboarding_tests', ['language'])

    op.create_table(
        'user_question_answers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('test_id', sa.Integer(), sa.ForeignKey('onboarding_tests.id'), nullable=False),
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('language_proficiency_questions.id'), nullable=False),
        sa.Column('selected_answer', sa.Integer(), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_user_question_answers_id', 'user_question_answers', ['id'])
    op.create_index('ix_user_question_answers_user_id', 'user_question_answers', ['user_id'])
    op.create_index('ix_user_question_answers_test_id', 'user_question_answers', ['test_id'])


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    op.drop_table('user_question_answers')
    op.drop_table('onboarding_tests')
    op.drop_table('language_proficiency_questions')
    op.drop_table('mt_quality_assessments')
    op.drop_table('evaluations')
    op.drop_index('uq_annotations_active_annotator_sentence', table_name='annotations')
    op.drop_table('annotations')
    op.drop_table('sentences')
    op.drop_table('users')

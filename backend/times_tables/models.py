from times_tables import db

# Width of runs.player_name; configured name limits are clamped to it
PLAYER_NAME_COLUMN_LENGTH = 64


class Run(db.Model):
    __tablename__ = 'runs'
    __table_args__ = (
        db.Index('ix_runs_ranking', 'score', 'elapsed_seconds', 'created_at'),
    )
    id = db.Column(db.Integer, primary_key=True)
    player_name = db.Column(db.String(PLAYER_NAME_COLUMN_LENGTH), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False)
    question_count = db.Column(db.Integer, nullable=False)
    correct_count = db.Column(db.Integer, nullable=False)
    elapsed_seconds = db.Column(db.Float, nullable=False)
    time_limit_seconds = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'playerName': self.player_name,
            'score': self.score,
            'questionCount': self.question_count,
            'correctCount': self.correct_count,
            'elapsedSeconds': self.elapsed_seconds,
            'timeLimitSeconds': self.time_limit_seconds,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

# motivation.py
from typing import Iterable

from models.workout_counter import Feedback

def get_motivation_text(rep_count: int) -> str:
    """
    Generate motivational messages based on current rep count.
    Cycles through predefined messages to encourage user progress.
    Returns "Ready to start!" for zero reps, otherwise formats with rep number.
    """

    motivational_messages = [
        "Keep it up!",
        "Nice and controlled!",
        "Strong rep!",
        "You're on fire!",
        "Great form, keep going!",
        "Beast mode on!",
        "Push through it!",
        "Looking solid!",
        "Stay focused!",
        "No pain, no gain!"
    ]

    if rep_count == 0:
        return "Ready to start!"

    # Cycle through messages based on rep count to maintain variety
    message_index = (rep_count - 1) % len(motivational_messages)
    selected_message = motivational_messages[message_index]

    return f"Rep {rep_count} - {selected_message}"

def get_rep_announcement(rep_count: int) -> str:
    """Short text spoken on every counted rep"""
    return f"Rep {rep_count}"

def get_form_quality(feedback: Iterable[Feedback]) -> str:
    """
    Summarize a frame's feedback: any error is Poor, any warning is Good,
    otherwise Perfect.
    """
    feedback = list(feedback)
    if any(f.type == "error" for f in feedback):
        return "Poor"
    if any(f.type == "warning" for f in feedback):
        return "Good"
    return "Perfect"

def get_start_text(exercise_name: str) -> str:
    return f"Starting {exercise_name}. Let's go!"

def get_calories_text(total_calories: float) -> str:
    return f"Congratulations! You have burned {round(total_calories)} calories!"

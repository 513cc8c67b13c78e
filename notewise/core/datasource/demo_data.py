"""
Seed dataset for fallback (demo) mode.

Rows use the legacy shape persisted in local state: `is_starred` and a
denormalized `tags` array of names.
"""

import copy

DEMO_USER = {"id": "demo-user", "email": "demo@aitoolsy.com", "name": "Demo User"}

DEMO_FOLDERS = [
    {"id": "folder-1", "name": "Work Projects", "color": "#3b82f6"},
    {"id": "folder-2", "name": "Personal", "color": "#10b981"},
    {"id": "folder-3", "name": "Ideas", "color": "#f59e0b"},
]

DEMO_NOTES = [
    {
        "id": "note-1",
        "user_id": "demo-user",
        "title": "AI-Powered Note Taking Features",
        "content": (
            "<h2>Smart Features Overview</h2>"
            "<p>This demo showcases the AI capabilities of the note-taking app:</p>"
            "<ul>"
            "<li><strong>AI Text Enhancement:</strong> Improve writing quality and clarity</li>"
            "<li><strong>Smart Summarization:</strong> Generate concise summaries of long notes</li>"
            "<li><strong>Content Expansion:</strong> Elaborate on ideas with AI assistance</li>"
            "<li><strong>Tone Adjustment:</strong> Modify the tone to match your audience</li>"
            "</ul>"
            "<p>Try editing this content and use the AI features in the toolbar above!</p>"
        ),
        "is_starred": True,
        "folder_id": "folder-1",
        "tags": ["AI", "features", "demo"],
        "created_at": "2024-01-15T10:00:00Z",
        "updated_at": "2024-01-15T14:30:00Z",
    },
    {
        "id": "note-2",
        "user_id": "demo-user",
        "title": "Meeting Notes - Product Roadmap",
        "content": (
            "<h2>Q1 2024 Product Roadmap Meeting</h2>"
            "<p><strong>Date:</strong> January 15, 2024</p>"
            "<p><strong>Attendees:</strong> Sarah, Mike, Alex, Jennifer</p>"
            "<h3>Key Decisions</h3>"
            "<ul>"
            "<li>Implement real-time collaboration features</li>"
            "<li>Enhance mobile app performance</li>"
            "<li>Add advanced search capabilities</li>"
            "</ul>"
            "<h3>Action Items</h3>"
            "<ul>"
            "<li>Sarah: Research collaboration tools integration</li>"
            "<li>Mike: Mobile performance optimization plan</li>"
            "<li>Alex: Search algorithm improvements</li>"
            "</ul>"
        ),
        "is_starred": False,
        "folder_id": "folder-1",
        "tags": ["meeting", "roadmap", "planning"],
        "created_at": "2024-01-15T09:00:00Z",
        "updated_at": "2024-01-15T11:45:00Z",
    },
    {
        "id": "note-3",
        "user_id": "demo-user",
        "title": "Creative Writing Ideas",
        "content": (
            "<h2>Story Concepts</h2>"
            "<h3>The Digital Librarian</h3>"
            "<p>An AI becomes sentient while organizing humanity's knowledge and starts "
            "predicting the future from hidden patterns in human behavior.</p>"
            "<h3>Constellation Maps</h3>"
            "<p>Emotions create visible light patterns in the sky, and a young astronomer "
            "discovers that constellations are collective human memories.</p>"
            "<h3>The Note Keeper</h3>"
            "<p>Every thought someone writes down comes to life in a parallel dimension.</p>"
        ),
        "is_starred": True,
        "folder_id": "folder-2",
        "tags": ["creative", "writing", "stories", "ideas"],
        "created_at": "2024-01-14T20:15:00Z",
        "updated_at": "2024-01-15T08:20:00Z",
    },
    {
        "id": "note-4",
        "user_id": "demo-user",
        "title": "Learning React Best Practices",
        "content": (
            "<h2>React Development Guidelines</h2>"
            "<h3>Component Design Principles</h3>"
            "<ul>"
            "<li><strong>Single Responsibility:</strong> Each component should have one clear purpose</li>"
            "<li><strong>Composition over Inheritance:</strong> Use composition patterns for flexibility</li>"
            "<li><strong>Props Interface:</strong> Define clear interfaces for props</li>"
            "</ul>"
            "<h3>Performance Optimization</h3>"
            "<ul>"
            "<li>Use memoization for expensive renders</li>"
            "<li>Keep callback references stable</li>"
            "<li>Optimize bundle size with lazy loading</li>"
            "</ul>"
        ),
        "is_starred": False,
        "folder_id": "folder-1",
        "tags": ["react", "programming", "learning", "best-practices"],
        "created_at": "2024-01-13T15:30:00Z",
        "updated_at": "2024-01-14T09:15:00Z",
    },
    {
        "id": "note-5",
        "user_id": "demo-user",
        "title": "Travel Journal - Tokyo Adventure",
        "content": (
            "<h2>Tokyo Trip - Day 1</h2>"
            "<p><strong>January 10, 2024</strong></p>"
            "<h3>Morning - Shibuya Crossing</h3>"
            "<p>Witnessed the famous scramble crossing at rush hour.</p>"
            "<h3>Afternoon - Meiji Shrine</h3>"
            "<p>A peaceful oasis in the middle of the bustling city.</p>"
            "<h3>Evening - Tsukiji Fish Market</h3>"
            "<p>Best sushi I've ever had!</p>"
            "<p><strong>Tomorrow's Plan:</strong> Visit TeamLab Borderless and explore Harajuku.</p>"
        ),
        "is_starred": True,
        "folder_id": "folder-2",
        "tags": ["travel", "tokyo", "journal", "experiences"],
        "created_at": "2024-01-10T22:00:00Z",
        "updated_at": "2024-01-11T08:45:00Z",
    },
    {
        "id": "note-6",
        "user_id": "demo-user",
        "title": "Startup Ideas & Innovations",
        "content": (
            "<h2>Innovative Business Concepts</h2>"
            "<h3>EcoTech Solutions</h3>"
            "<p>Biodegradable tech components that decompose without environmental impact.</p>"
            "<h3>AI Personal Nutritionist</h3>"
            "<p>Personalized meal plans from health data, food preferences and lifestyle.</p>"
            "<h3>Virtual Reality Therapy</h3>"
            "<p>VR environments for phobia reduction and stress relief.</p>"
            "<p><em>Research needed: Market validation, technical feasibility, funding requirements</em></p>"
        ),
        "is_starred": False,
        "folder_id": "folder-3",
        "tags": ["startup", "innovation", "business", "tech"],
        "created_at": "2024-01-12T11:20:00Z",
        "updated_at": "2024-01-13T16:40:00Z",
    },
]


def demo_notes() -> list[dict]:
    """Fresh copy of the seed notes."""
    return copy.deepcopy(DEMO_NOTES)


def demo_folders() -> list[dict]:
    """Fresh copy of the seed folders."""
    return copy.deepcopy(DEMO_FOLDERS)

"""
Replace the catalog (projects and courses) with the stock content.

    python seed.py
"""
import logging

from database import create_documents, delete_documents
from schemas import Course, Project

logger = logging.getLogger(__name__)

PROJECTS = [
    Project(
        title="Dr. AIRA - Medical Brain",
        category="ai",
        image="https://placehold.co/600x400/0f0a2e/00f3ff?text=Dr.+AIRA+Medical+AI",
        description="Advanced medical AI consultant acting as a 'Senior Doctor'. Provides real-time guidance, diagnosis assistance, and medical insights.",
        tags=["Medical AI", "Healthcare", "Agentic AI"],
        link="https://draira.com",
        badge="⭐ Top Featured",
        featured=True,
        priority=10,
    ),
    Project(
        title="Smart Desktop Assistant",
        category="web",
        image="https://placehold.co/600x400/0f0a2e/ad52e6?text=Smart+Desktop+Assistant",
        description="Intelligent Python-based system for automating complex desktop tasks. Features voice, automation scripts, and file management.",
        tags=["Python", "Automation", "Voice Control"],
        badge="⭐ Best Seller",
        featured=True,
        priority=9,
    ),
    Project(
        title="Data Privacy in Agentic AI",
        category="research",
        image="https://placehold.co/600x400/0f0a2e/ebb3ff?text=Data+Privacy+AI",
        description="Technical research on 'GDPR, HIPAA, and Best Practices' in Agentic AI systems.",
        tags=["Research", "GDPR/HIPAA", "Security"],
        badge="Research",
    ),
    Project(
        title="YouTube Content Detection",
        category="ai",
        image="https://placehold.co/600x400/0f0a2e/00f3ff?text=Content+Detection",
        description="Deep learning system for detecting and classifying inappropriate content in videos.",
        tags=["Deep Learning", "CV", "Safety"],
        badge="Deep Learning",
    ),
    Project(
        title="Diabetes Prediction Model",
        category="ai",
        image="https://placehold.co/600x400/0f0a2e/ebb3ff?text=Diabetes+Prediction",
        description="Advanced ML model for accurate assessment and prediction of diabetes risk.",
        tags=["ML", "Analytics", "Python"],
        badge="AI Health",
    ),
    Project(
        title="AI-Based Stress Detection",
        category="ai",
        image="https://placehold.co/600x400/0f0a2e/ad52e6?text=Stress+Detection",
        description="Real-time stress level analysis using facial expressions and voice data.",
        tags=["Real-time", "Face & Voice", "Python"],
        badge="AI Analysis",
    ),
    Project(
        title="E-commerce Platform",
        category="web",
        image="https://placehold.co/600x400/0f0a2e/00f3ff?text=E-commerce+Platform",
        description="Comprehensive platform built for secure online commercial transactions.",
        tags=["Web Dev", "Full Stack", "Payment"],
        badge="Web App",
    ),
    Project(
        title="Cybersecurity Network Sniffer",
        category="security",
        image="https://placehold.co/600x400/0f0a2e/ad52e6?text=Network+Sniffer",
        description="Advanced tool for real-time monitoring of network traffic and threat detection.",
        tags=["Network Security", "Packet Analysis", "Monitoring"],
        badge="Security",
    ),
]

COURSES = [
    Course(
        title="Wix Website Building",
        level="beginner",
        duration="3 weeks",
        badge="Beginner Friendly",
        description="Learn to build professional, stunning websites without coding using Wix. Perfect for portfolios and businesses.",
        features=["Complete Portfolio Site", "E-commerce Store", "Business Landing Page"],
    ),
    Course(
        title="Building AI/ML/DL Projects",
        level="intermediate",
        duration="8 weeks",
        badge="Career Track",
        description="Master Artificial Intelligence, Machine Learning, and Deep Learning by building real-world projects.",
        features=["Prediction Models", "Image Recognition Systems", "NLP Chatbots"],
    ),
    Course(
        title="Web Development Projects",
        level="advanced",
        duration="6 weeks",
        badge="Core Skill",
        description="Comprehensive training on building dynamic web applications using modern full-stack technologies.",
        features=["Full-Stack Web Apps", "Interactive Dashboards", "API Integrations"],
    ),
]


def seed() -> dict:
    delete_documents("project")
    delete_documents("course")
    projects = create_documents("project", PROJECTS)
    courses = create_documents("course", COURSES)
    logger.info("Imported %d projects and %d courses", len(projects), len(courses))
    return {"projects": len(projects), "courses": len(courses)}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()

"""
Curated keyword vocabulary for job/resume matching.

Terms are listed with their canonical spelling; matching is case-insensitive
except for CASE_SENSITIVE_TERMS, which double as everyday English words.
"""
from typing import List


def _terms(block: str) -> List[str]:
    return [t.strip() for t in block.replace("\n", ",").split(",") if t.strip()]


# Skill-like terms: eligible to be added to a resume's skills section.
SKILL_TERMS = _terms("""
JavaScript, Python, React, Node.js, AWS, Docker, Kubernetes, SQL, NoSQL, API, REST, GraphQL,
TypeScript, Java, C++, C#, PHP, Ruby, Go, Rust, Swift, Kotlin, Flutter, Angular, Vue,
Express, Django, Flask, Spring, Laravel, Rails, MongoDB, PostgreSQL, MySQL, Redis,
Elasticsearch, Git, Jenkins, CI/CD, Agile, Scrum, DevOps, Machine Learning, AI,
Data Science, Cloud, Microservices, Serverless, Blockchain, IoT, Mobile, Frontend,
Backend, Full Stack, UI/UX, Design
""")

TECH_TERMS = _terms("""
FastAPI, Next.js, Svelte, Tailwind, HTML, CSS, Sass, Webpack, Linux, Bash, Scala, R,
MATLAB, Pandas, NumPy, TensorFlow, PyTorch, scikit-learn, Deep Learning, NLP,
Computer Vision, LLM, Hadoop, Spark, Kafka, Airflow, dbt, Snowflake, Redshift, BigQuery,
Databricks, Tableau, Power BI, Looker, Grafana, Prometheus, Splunk, Datadog, ETL,
Data Pipeline, Data Warehouse, Big Data, Azure, GCP, Terraform, Ansible, Helm,
CloudFormation, Lambda, OpenShift, Istio, Vault, Nginx, RabbitMQ, gRPC, WebSockets,
OAuth, JWT, SSO, Selenium, Cypress, Jest, Pytest, Figma, Jira, Confluence, Salesforce,
HubSpot, SAP, Excel, Android, iOS, Unity
""")

PRACTICE_TERMS = _terms("""
Analytics, Reporting, Dashboard, Visualization, Automation, Integration, Migration,
Optimization, Performance, Scalability, Reliability, Availability, Monitoring, Logging,
Debugging, Troubleshooting, Documentation, Security, Cybersecurity, Compliance, Testing,
QA, Unit Testing, Test Driven Development, Code Review, Version Control, System Design,
Architecture, Infrastructure, Deployment, Release Management, Containerization,
Orchestration, Load Balancing, Caching, High Availability, Disaster Recovery,
Database Design, Data Modeling, Query Optimization, Distributed Systems,
Event Driven Architecture, Cloud Native, Product Management, Project Management,
Stakeholder Management, Risk Management, Change Management, Strategic Planning,
Business Analysis, Requirements Gathering, SaaS, E-commerce, Fintech, Healthcare,
B2B, B2C, SEO, SEM, A/B Testing, Customer Success, Marketing, Sales, Budgeting
""")

SOFT_SKILL_TERMS = _terms("""
Leadership, Mentoring, Collaboration, Communication, Problem Solving, Critical Thinking,
Innovation, Creativity, Adaptability, Time Management, Organization, Attention to Detail,
Teamwork, Cross-functional, Ownership, Continuous Improvement, Best Practices
""")

# Dictionary words that only count as keywords when capitalised as a proper noun.
CASE_SENSITIVE_TERMS = frozenset(_terms("""
Go, Swift, Rust, Spring, Express, Rails, Flask, Vault, Helm, Lambda, Unity, Excel, R
"""))

VOCABULARY = list(dict.fromkeys(SKILL_TERMS + TECH_TERMS + PRACTICE_TERMS + SOFT_SKILL_TERMS))

SKILL_TERMS_LOWER = frozenset(t.lower() for t in SKILL_TERMS)

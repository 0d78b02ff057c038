"""
Skill dictionary used by the candidate and job-description extractors.

Entries are canonical lower-case names grouped by category. ``SKILL_ALIASES``
maps a canonical name to alternative spellings that should be reported as that
canonical. Everything is compiled once at import time into boundary-aware
patterns, so matching never builds a regex per call.
"""
import re
from typing import Dict, List, Pattern, Tuple

SKILLS_DB: Dict[str, List[str]] = {
    'programming_languages': [
        'python', 'java', 'javascript', 'typescript', 'c++', 'c#', 'c',
        'ruby', 'php', 'swift', 'kotlin', 'go', 'rust', 'scala', 'r',
        'perl', 'dart', 'objective-c', 'sql', 'bash', 'powershell', 'shell',
        'matlab', 'lua', 'haskell', 'elixir', 'erlang', 'clojure', 'f#',
        'groovy', 'julia', 'fortran', 'cobol', 'assembly', 'vba', 'solidity',
        'visual basic', 'delphi', 'ocaml', 'zig', 'webassembly',
    ],
    'frontend': [
        'react', 'angular', 'vue', 'svelte', 'next.js', 'nuxt.js', 'gatsby',
        'html', 'css', 'sass', 'less', 'tailwind', 'bootstrap', 'jquery',
        'redux', 'mobx', 'webpack', 'vite', 'babel', 'material ui',
        'chakra ui', 'storybook', 'ember.js', 'backbone.js', 'three.js',
        'd3.js', 'rxjs', 'zustand', 'htmx', 'web components',
    ],
    'backend': [
        'node.js', 'express', 'django', 'flask', 'fastapi', 'spring',
        'spring boot', 'asp.net', '.net', '.net core', 'laravel', 'symfony',
        'ruby on rails', 'nestjs', 'graphql', 'rest api', 'grpc',
        'microservices', 'hibernate', 'celery', 'sqlalchemy', 'koa', 'hapi',
        'gin', 'fiber', 'phoenix', 'quarkus', 'micronaut', 'deno', 'bun',
        'websockets', 'oauth', 'jwt', 'soap', 'rabbitmq', 'kafka',
        'activemq', 'nats', 'openapi', 'swagger',
    ],
    'mobile': [
        'android', 'ios', 'flutter', 'react native', 'xamarin', 'ionic',
        'swiftui', 'jetpack compose', 'kotlin multiplatform', 'cordova',
    ],
    'databases': [
        'mysql', 'postgresql', 'mongodb', 'redis', 'elasticsearch',
        'cassandra', 'dynamodb', 'oracle', 'sql server', 'sqlite', 'neo4j',
        'couchdb', 'mariadb', 'firebase', 'supabase', 'snowflake',
        'bigquery', 'redshift', 'clickhouse', 'cockroachdb', 'influxdb',
        'timescaledb', 'memcached', 'couchbase', 'hbase', 'pinecone',
        'weaviate', 'milvus', 'opensearch', 'teradata', 'db2',
    ],
    'cloud_devops': [
        'aws', 'azure', 'gcp', 'docker', 'kubernetes', 'jenkins',
        'gitlab ci', 'github actions', 'terraform', 'ansible', 'circleci',
        'travis ci', 'heroku', 'digitalocean', 'vercel', 'netlify', 'linux',
        'unix', 'nginx', 'apache', 'ci/cd', 'helm', 'openshift', 'puppet',
        'chef', 'vagrant', 'prometheus', 'grafana', 'datadog', 'new relic',
        'splunk', 'elk stack', 'cloudformation', 'pulumi', 'argocd',
        'istio', 'serverless', 'aws lambda', 'ec2', 's3', 'ecs', 'eks',
        'cloudflare', 'devops', 'sre', 'bitbucket pipelines', 'teamcity',
    ],
    'data_ml': [
        'machine learning', 'deep learning', 'nlp', 'computer vision',
        'data analysis', 'data science', 'big data', 'hadoop', 'spark',
        'pyspark', 'airflow', 'dbt', 'tensorflow', 'pytorch', 'keras',
        'scikit-learn', 'pandas', 'numpy', 'scipy', 'matplotlib', 'seaborn',
        'plotly', 'jupyter', 'opencv', 'hugging face', 'transformers',
        'langchain', 'llamaindex', 'llm', 'generative ai',
        'artificial intelligence', 'reinforcement learning', 'xgboost',
        'lightgbm', 'mlflow', 'kubeflow', 'sagemaker', 'databricks',
        'data engineering', 'etl', 'data warehousing', 'data visualization',
        'statistics', 'a/b testing', 'time series', 'feature engineering',
        'prompt engineering', 'rag', 'vector databases', 'mlops', 'flink',
        'beam', 'hive', 'presto', 'kinesis',
    ],
    'testing_qa': [
        'testing', 'unit testing', 'tdd', 'bdd', 'jest', 'mocha', 'cypress',
        'selenium', 'playwright', 'pytest', 'junit', 'testng', 'cucumber',
        'postman', 'jmeter', 'karma', 'jasmine', 'rspec', 'qa automation',
        'manual testing', 'load testing',
    ],
    'tools_technologies': [
        'git', 'github', 'gitlab', 'bitbucket', 'jira', 'confluence',
        'trello', 'notion', 'slack', 'vs code', 'intellij', 'figma',
        'adobe xd', 'sketch', 'photoshop', 'illustrator', 'tableau',
        'power bi', 'looker', 'excel', 'sap', 'salesforce', 'hubspot',
        'servicenow', 'sharepoint', 'wordpress', 'shopify', 'magento',
        'blockchain', 'iot', 'ar/vr', 'unity', 'unreal engine', 'blender',
        'autocad', 'solidworks', 'google analytics', 'seo', 'sem',
    ],
    'security': [
        'security', 'cybersecurity', 'penetration testing', 'owasp',
        'siem', 'iam', 'sso', 'encryption', 'network security',
        'vulnerability assessment', 'soc 2', 'iso 27001', 'gdpr',
    ],
    'methodologies': [
        'agile', 'scrum', 'kanban', 'lean', 'waterfall', 'devsecops',
        'design patterns', 'object-oriented programming',
        'functional programming', 'system design', 'distributed systems',
        'event-driven architecture', 'domain-driven design',
        'clean architecture', 'code review', 'pair programming',
        'ux design', 'ui design', 'responsive design', 'accessibility',
        'technical writing', 'project management', 'product management',
        'six sigma', 'itil', 'prince2', 'pmp',
    ],
    'soft_skills': [
        'communication', 'leadership', 'teamwork', 'problem solving',
        'critical thinking', 'time management', 'collaboration',
        'adaptability', 'creativity', 'mentoring', 'negotiation',
        'presentation', 'stakeholder management', 'decision making',
        'conflict resolution', 'attention to detail', 'analytical skills',
        'customer service', 'public speaking', 'emotional intelligence',
        'self-motivated', 'organizational skills', 'interpersonal skills',
        'multitasking', 'coaching', 'strategic planning',
    ],
}

SKILL_ALIASES: Dict[str, List[str]] = {
    'javascript': ['js', 'ecmascript', 'es6'],
    'typescript': ['ts'],
    'c++': ['cpp'],
    'c#': ['csharp'],
    'go': ['golang'],
    'python': ['python3'],
    'objective-c': ['objc'],
    'react': ['reactjs', 'react.js'],
    'vue': ['vuejs', 'vue.js'],
    'angular': ['angularjs', 'angular.js'],
    'next.js': ['nextjs'],
    'nuxt.js': ['nuxtjs', 'nuxt'],
    'node.js': ['nodejs', 'node'],
    'express': ['express.js', 'expressjs'],
    'nestjs': ['nest.js'],
    'tailwind': ['tailwindcss', 'tailwind css'],
    'ruby on rails': ['rails', 'ror'],
    'rest api': ['rest apis', 'restful', 'restful api', 'restful apis'],
    'postgresql': ['postgres', 'psql'],
    'mongodb': ['mongo'],
    'sql server': ['mssql', 'ms sql', 'microsoft sql server'],
    'elasticsearch': ['elastic search'],
    'aws': ['amazon web services'],
    'azure': ['microsoft azure'],
    'gcp': ['google cloud', 'google cloud platform'],
    'kubernetes': ['k8s'],
    'ci/cd': ['cicd', 'ci cd', 'continuous integration', 'continuous delivery'],
    'machine learning': ['ml'],
    'deep learning': ['dl'],
    'nlp': ['natural language processing'],
    'artificial intelligence': ['ai'],
    'scikit-learn': ['sklearn', 'scikit learn'],
    'hugging face': ['huggingface'],
    'llm': ['llms', 'large language models'],
    'generative ai': ['genai', 'gen ai'],
    'power bi': ['powerbi'],
    'vs code': ['vscode', 'visual studio code'],
    'github actions': ['gh actions'],
    'gitlab ci': ['gitlab-ci'],
    'object-oriented programming': ['oop', 'object oriented programming'],
    'elk stack': ['elk'],
    'aws lambda': ['lambda'],
    'a/b testing': ['ab testing', 'split testing'],
    'rag': ['retrieval augmented generation', 'retrieval-augmented generation'],
    'unit testing': ['unit tests'],
    'problem solving': ['problem-solving'],
    'teamwork': ['team work', 'team player'],
    'critical thinking': ['critical-thinking'],
    'time management': ['time-management'],
    'communication': ['communication skills'],
    'leadership': ['team leadership'],
    'ux design': ['ux'],
    'ui design': ['ui'],
    '.net': ['dotnet'],
}

# Boundaries are look-arounds so entries that start or end with non-word
# characters (c++, c#, .net) still match as whole tokens.
_LEFT_BOUNDARY = r'(?<![a-z0-9_+#.])'
_RIGHT_BOUNDARY = r'(?![a-z0-9_+#])'


def skill_pattern(term: str) -> Pattern:
    """Compile a whole-token pattern for a lower-case skill term."""
    parts = [re.escape(p) for p in term.lower().split()]
    return re.compile(_LEFT_BOUNDARY + r'\s+'.join(parts) + _RIGHT_BOUNDARY)


def _build_dictionary() -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
    entries = []
    seen = set()
    for skills in SKILLS_DB.values():
        for skill in skills:
            canonical = skill.strip().lower()
            if not canonical or canonical in seen:
                continue
            seen.add(canonical)
            aliases = tuple(a.lower() for a in SKILL_ALIASES.get(canonical, []))
            entries.append((canonical, aliases))
    return tuple(entries)


# (canonical, aliases) in dictionary order
SKILL_DICTIONARY = _build_dictionary()

ALL_SKILLS: Tuple[str, ...] = tuple(canonical for canonical, _ in SKILL_DICTIONARY)

# canonical -> alternation of its own spelling and every alias
COMPILED_SKILLS: Tuple[Tuple[str, Pattern], ...] = tuple(
    (
        canonical,
        re.compile('|'.join(skill_pattern(term).pattern for term in (canonical,) + aliases)),
    )
    for canonical, aliases in SKILL_DICTIONARY
)

# every known spelling -> canonical
TERM_TO_CANONICAL: Dict[str, str] = {}
for _canonical, _aliases in SKILL_DICTIONARY:
    for _term in (_canonical,) + _aliases:
        TERM_TO_CANONICAL.setdefault(_term, _canonical)


def find_dictionary_skills(text: str) -> List[str]:
    """Canonical names of every dictionary skill present in ``text``, in dictionary order."""
    if not text:
        return []
    lowered = text.lower()
    return [canonical for canonical, pattern in COMPILED_SKILLS if pattern.search(lowered)]


def related_dictionary_term(token: str) -> bool:
    """
    True when ``token`` is a dictionary term, or shares a substring relation
    with one where both sides are longer than three characters.
    """
    token = token.strip().lower()
    if not token:
        return False
    if token in TERM_TO_CANONICAL:
        return True
    if len(token) <= 3:
        return False
    for term in TERM_TO_CANONICAL:
        if len(term) > 3 and (term in token or token in term):
            return True
    return False

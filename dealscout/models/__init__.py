# Models package - database tables
from dealscout.models.persona import Persona
from dealscout.models.feedback import Feedback, SyncQueueItem
from dealscout.models.weight import LearnedWeight
